"""
Contact store implementations.

The resolver only ever talks to a ContactStore, so the ORM-backed store used
by the web service and the in-memory store used by the unit tests are
interchangeable. Both exclude soft-deleted rows from every read.
"""

import contextlib
import itertools
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from .exceptions import StoreError
from .models import Contact
from .records import ContactRecord


class ContactStore(ABC):
    @abstractmethod
    def find_matching(
        self, email: Optional[str], phone_number: Optional[str]
    ) -> List[ContactRecord]:
        """Rows whose email equals `email` OR whose phone equals `phone_number`.

        A side whose input is None is left out of the predicate.
        """

    @abstractmethod
    def find_by_ids_or_links(self, ids: Iterable[int]) -> List[ContactRecord]:
        """Rows whose own id or linked_id is in `ids`."""

    @abstractmethod
    def insert(
        self,
        email: Optional[str],
        phone_number: Optional[str],
        link_precedence: str,
        linked_id: Optional[int] = None,
    ) -> ContactRecord:
        """Create a row; the store assigns the id and timestamps."""

    @abstractmethod
    def update_precedence(
        self,
        contact_id: int,
        link_precedence: str,
        linked_id: Optional[int],
        updated_at: datetime,
    ) -> None:
        pass

    def atomic(self):
        return contextlib.nullcontext()


@contextlib.contextmanager
def _database_errors():
    try:
        yield
    except DatabaseError as e:
        raise StoreError(f"Contact store failure: {e}") from e


class DjangoContactStore(ContactStore):
    def __init__(self, using: Optional[str] = None):
        self.using = using

    def _live(self):
        return Contact.objects.using(self.using).filter(deleted_at__isnull=True)

    def find_matching(self, email, phone_number):
        predicate = Q()
        if email is not None:
            predicate |= Q(email=email)
        if phone_number is not None:
            predicate |= Q(phone_number=phone_number)
        if not predicate:
            return []
        with _database_errors():
            return [c.to_record() for c in self._live().filter(predicate)]

    def find_by_ids_or_links(self, ids):
        ids = list(ids)
        if not ids:
            return []
        with _database_errors():
            rows = self._live().filter(Q(id__in=ids) | Q(linked_id__in=ids))
            return [c.to_record() for c in rows]

    def insert(self, email, phone_number, link_precedence, linked_id=None):
        with _database_errors():
            contact = Contact.objects.using(self.using).create(
                email=email,
                phone_number=phone_number,
                link_precedence=link_precedence,
                linked_id=linked_id,
            )
        return contact.to_record()

    def update_precedence(self, contact_id, link_precedence, linked_id, updated_at):
        # queryset.update() skips auto_now, so updated_at is written as given
        with _database_errors():
            Contact.objects.using(self.using).filter(pk=contact_id).update(
                link_precedence=link_precedence,
                linked_id=linked_id,
                updated_at=updated_at,
            )

    def atomic(self):
        return transaction.atomic(using=self.using)


class InMemoryContactStore(ContactStore):
    """List-backed store with the same contract as DjangoContactStore."""

    def __init__(self, clock: Callable[[], datetime] = timezone.now):
        self.clock = clock
        self.writes = 0
        self._rows = {}
        self._ids = itertools.count(1)

    def all(self) -> List[ContactRecord]:
        return sorted(self._rows.values(), key=lambda c: c.id)

    def get(self, contact_id: int) -> ContactRecord:
        return self._rows[contact_id]

    def _live(self):
        return [c for c in self.all() if c.deleted_at is None]

    def find_matching(self, email, phone_number):
        return [
            c
            for c in self._live()
            if (email is not None and c.email == email)
            or (phone_number is not None and c.phone_number == phone_number)
        ]

    def find_by_ids_or_links(self, ids):
        ids = set(ids)
        return [c for c in self._live() if c.id in ids or c.linked_id in ids]

    def insert(self, email, phone_number, link_precedence, linked_id=None):
        now = self.clock()
        record = ContactRecord(
            id=next(self._ids),
            email=email,
            phone_number=phone_number,
            link_precedence=link_precedence,
            linked_id=linked_id,
            created_at=now,
            updated_at=now,
        )
        self._rows[record.id] = record
        self.writes += 1
        return record

    def update_precedence(self, contact_id, link_precedence, linked_id, updated_at):
        self._rows[contact_id] = replace(
            self._rows[contact_id],
            link_precedence=link_precedence,
            linked_id=linked_id,
            updated_at=updated_at,
        )
        self.writes += 1

    def soft_delete(self, contact_id: int) -> None:
        self._rows[contact_id] = replace(self._rows[contact_id], deleted_at=self.clock())
