"""
Cluster resolution for incoming identity fragments.

Given an email and/or phone number, the resolver finds the cluster the
fragment belongs to, collapses competing primaries onto the oldest one, and
records a new secondary contact when the fragment carries a value the cluster
has never seen.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from django.utils import timezone

from .exceptions import ConsistencyViolation, ValidationError
from .locator import locate_cluster
from .locks import IdentityLocks, identity_keys
from .records import PRIMARY, SECONDARY, ContactRecord
from .store import ContactStore

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    primary: ContactRecord
    cluster: List[ContactRecord]


def clean_identifier(value) -> Optional[str]:
    """Strips surrounding whitespace; blank values count as absent."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def canonical_primary(cluster: List[ContactRecord]) -> ContactRecord:
    """Oldest primary of a located cluster, after checking its links."""
    for contact in cluster:
        if not contact.is_primary and contact.linked_id is None:
            raise ConsistencyViolation(f"Secondary contact {contact.id} has no linked primary")

    primaries = [c for c in cluster if c.is_primary]
    if not primaries:
        ids = [c.id for c in cluster]
        raise ConsistencyViolation(f"Cluster {ids} has no primary contact")
    return min(primaries, key=lambda c: c.sort_key)


class ClusterResolver:
    def __init__(
        self,
        store: ContactStore,
        locks: Optional[IdentityLocks] = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.store = store
        self.locks = locks or IdentityLocks()
        self.clock = clock

    def resolve(self, email=None, phone_number=None) -> Resolution:
        email = clean_identifier(email)
        phone_number = clean_identifier(phone_number)
        if email is None and phone_number is None:
            raise ValidationError("Either email or phoneNumber must be provided.")

        with self.locks.hold(identity_keys(email, phone_number)):
            with self.store.atomic():
                created = self._reconcile(email, phone_number)
                if created is not None:
                    return Resolution(primary=created, cluster=[created])
                cluster = locate_cluster(self.store, email, phone_number)

        primary = canonical_primary(cluster)
        extra = [c.id for c in cluster if c.is_primary and c.id != primary.id]
        if extra:
            raise ConsistencyViolation(
                f"Cluster of {primary.id} still has primaries {extra} after merge"
            )
        return Resolution(primary=primary, cluster=cluster)

    def _reconcile(self, email, phone_number) -> Optional[ContactRecord]:
        """Writes whatever the fragment requires.

        Returns the new primary when the fragment starts a new cluster.
        """
        cluster = locate_cluster(self.store, email, phone_number)
        if not cluster:
            contact = self.store.insert(email, phone_number, PRIMARY)
            logger.info(f"Created primary contact {contact.id}")
            return contact

        primary = canonical_primary(cluster)
        self._flatten(primary, cluster)

        known_emails = {c.email for c in cluster if c.email}
        known_phones = {c.phone_number for c in cluster if c.phone_number}
        is_novel = (email is not None and email not in known_emails) or (
            phone_number is not None and phone_number not in known_phones
        )
        if is_novel:
            contact = self.store.insert(email, phone_number, SECONDARY, linked_id=primary.id)
            logger.info(f"Created secondary contact {contact.id} linked to {primary.id}")
        return None

    def _flatten(self, primary: ContactRecord, cluster: List[ContactRecord]) -> None:
        """Links every other member of the cluster directly to `primary`."""
        demoted = []
        now = self.clock()
        for contact in cluster:
            if contact.id == primary.id:
                continue
            if contact.is_primary:
                demoted.append(contact.id)
            elif contact.linked_id == primary.id:
                continue
            self.store.update_precedence(contact.id, SECONDARY, primary.id, now)

        if demoted:
            logger.info(f"Merged primaries {demoted} into {primary.id}")
