from django.db import models

from .records import ContactRecord


class LinkPrecedence(models.TextChoices):
    PRIMARY = "primary", "Primary"
    SECONDARY = "secondary", "Secondary"


class Contact(models.Model):
    LinkPrecedence = LinkPrecedence

    id = models.AutoField(primary_key=True)
    phone_number = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    email = models.EmailField(null=True, blank=True, db_index=True)

    # Secondary contacts point straight at their primary, never at another secondary
    linked = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="secondary_contacts",
    )

    link_precedence = models.CharField(max_length=10, choices=LinkPrecedence.choices)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(email__isnull=False) | models.Q(phone_number__isnull=False),
                name="contact_info_required",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(link_precedence=LinkPrecedence.PRIMARY, linked__isnull=True)
                    | models.Q(link_precedence=LinkPrecedence.SECONDARY, linked__isnull=False)
                ),
                name="secondary_requires_link",
            ),
        ]

    def __str__(self):
        return f"ID: {self.id} - {self.email or self.phone_number}"

    def to_record(self) -> ContactRecord:
        return ContactRecord(
            id=self.id,
            email=self.email,
            phone_number=self.phone_number,
            link_precedence=self.link_precedence,
            linked_id=self.linked_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
            deleted_at=self.deleted_at,
        )
