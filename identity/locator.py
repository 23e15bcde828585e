import logging
from typing import List, Optional

from .records import ContactRecord

logger = logging.getLogger(__name__)


def locate_cluster(
    store, email: Optional[str] = None, phone_number: Optional[str] = None
) -> List[ContactRecord]:
    """
    Returns every contact connected to the given email and/or phone number,
    ordered by creation.

    Direct matches alone miss sibling secondaries that share a primary but
    not the queried value, so a second pass fetches everything linked to the
    matched rows or their primaries. Links are flat, so one pass is enough.
    """
    matches = store.find_matching(email, phone_number)
    if not matches:
        return []

    seeds = set()
    for c in matches:
        seeds.add(c.id)
        if c.linked_id is not None:
            seeds.add(c.linked_id)

    cluster = {c.id: c for c in store.find_by_ids_or_links(seeds)}
    logger.debug(
        f"Located {len(cluster)} contacts from {len(matches)} direct matches "
        f"for email={email!r} phone={phone_number!r}"
    )
    return sorted(cluster.values(), key=lambda c: c.sort_key)
