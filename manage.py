#!/usr/bin/env python
import os
import sys


def main():
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "reconciler.settings")
    from django.conf import settings
    from django.core.management import execute_from_command_line
    from django.core.management.commands.runserver import Command as RunserverCommand

    RunserverCommand.default_port = settings.PORT
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
