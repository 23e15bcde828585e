class IdentityError(Exception):
    """Base class for failures raised while reconciling an identity."""


class ValidationError(IdentityError):
    """Neither an email nor a phone number was supplied."""


class StoreError(IdentityError):
    """The contact store failed to read or write."""


class ConsistencyViolation(IdentityError):
    """A located cluster breaks the primary/secondary link invariants."""
