"""Anonymous session identity.

Carts belong to an opaque client-held token, not to an authenticated user.
The token is carried as-is; holding it is all it takes to read or change the
cart. ``customer_id`` is the upgrade path to authenticated ownership and is
never set by anonymous flows.
"""

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class SessionIdentity:
    token: str
    customer_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.customer_id is not None

    @classmethod
    def mint(cls) -> "SessionIdentity":
        return cls(token=uuid4().hex)
