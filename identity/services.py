from typing import Optional

from .locks import IdentityLocks
from .resolver import ClusterResolver
from .response import IdentityView, build_identity_view
from .store import DjangoContactStore

# Shared by every resolver in this process so concurrent requests for the
# same email or phone queue behind each other.
identity_locks = IdentityLocks()


def get_resolver() -> ClusterResolver:
    return ClusterResolver(DjangoContactStore(), locks=identity_locks)


def reconcile_identity(
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    *,
    resolver: Optional[ClusterResolver] = None,
) -> IdentityView:
    resolver = resolver or get_resolver()
    resolution = resolver.resolve(email=email, phone_number=phone_number)
    return build_identity_view(resolution.primary, resolution.cluster)
