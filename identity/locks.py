import threading
from contextlib import ExitStack, contextmanager
from typing import Iterable, List, Optional


def identity_keys(email: Optional[str], phone_number: Optional[str]) -> List[str]:
    """Lock keys for a fragment, in the order they must be acquired."""
    keys = []
    if email:
        keys.append(f"email:{email.strip().casefold()}")
    if phone_number:
        digits = "".join(ch for ch in phone_number if ch.isdigit() or ch == "+")
        keys.append(f"phone:{digits or phone_number.strip()}")
    return sorted(keys)


class IdentityLocks:
    """
    Keyed mutual exclusion for resolves touching the same email or phone.

    Locks are created on first use and dropped once no thread holds or waits
    for them.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}
        self._users = {}

    def _checkout(self, key):
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _checkin(self, key):
        with self._guard:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    @contextmanager
    def _held(self, key):
        lock = self._checkout(key)
        try:
            with lock:
                yield
        finally:
            self._checkin(key)

    @contextmanager
    def hold(self, keys: Iterable[str]):
        # Sorted, de-duplicated acquisition order keeps two resolves from
        # deadlocking on each other's keys.
        with ExitStack() as stack:
            for key in sorted(set(keys)):
                stack.enter_context(self._held(key))
            yield

    def __len__(self):
        with self._guard:
            return len(self._locks)
