"""Stores bound to an active transaction connection.

Each store wraps the SQL for one table family and returns immutable
snapshots from :mod:`housectl.domain.models`. Stores never open or
commit transactions; the caller owns the boundary.
"""

from housectl.infrastructure.repositories.houses import HouseRegistry
from housectl.infrastructure.repositories.identity import IdentityStore
from housectl.infrastructure.repositories.ledger import LedgerInitializer
from housectl.infrastructure.repositories.memberships import MembershipStore

__all__ = ["HouseRegistry", "IdentityStore", "LedgerInitializer", "MembershipStore"]
