from dataclasses import dataclass, field
from typing import Iterable, List

from .records import ContactRecord


@dataclass
class IdentityView:
    primary_contact_id: int
    emails: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    secondary_contact_ids: List[int] = field(default_factory=list)

    def to_dict(self):
        return {
            "contact": {
                "primaryContatctId": self.primary_contact_id,
                "emails": list(self.emails),
                "phoneNumbers": list(self.phone_numbers),
                "secondaryContactIds": list(self.secondary_contact_ids),
            }
        }


def build_identity_view(primary: ContactRecord, cluster: Iterable[ContactRecord]) -> IdentityView:
    """
    Consolidates a resolved cluster for the API response.

    The primary's own email and phone come first, then every other member's
    values in creation order, keeping the first occurrence of each value.
    """
    view = IdentityView(primary_contact_id=primary.id)
    others = sorted((c for c in cluster if c.id != primary.id), key=lambda c: c.sort_key)

    for contact in [primary, *others]:
        if contact.email and contact.email not in view.emails:
            view.emails.append(contact.email)
        if contact.phone_number and contact.phone_number not in view.phone_numbers:
            view.phone_numbers.append(contact.phone_number)

    view.secondary_contact_ids = [c.id for c in others]
    return view
