from dataclasses import dataclass
from datetime import datetime
from typing import Optional

PRIMARY = "primary"
SECONDARY = "secondary"


@dataclass(frozen=True)
class ContactRecord:
    """Store-independent snapshot of a single contact row."""

    id: int
    email: Optional[str]
    phone_number: Optional[str]
    link_precedence: str
    linked_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_primary(self) -> bool:
        return self.link_precedence == PRIMARY

    @property
    def sort_key(self):
        return (self.created_at, self.id)
