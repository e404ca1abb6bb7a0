"""oraclevault.governance.roles

Role-based access control.

Permission matrix:
| Role     | Propose/accept | Reject (veto) | Liquidity + rebalance | Fees/caps | Name successor |
|----------|----------------|---------------|-----------------------|-----------|----------------|
| owner    | yes            | no            | no                    | yes       | owner, manager |
| guardian | no             | yes           | no                    | no        | guardian only  |
| manager  | no             | no            | yes                   | no        | no             |

Each permission belongs to exactly one role. Keys are independent: a compromised
owner cannot force a change past the guardian, a compromised guardian can only block.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from oraclevault.core.exceptions import AuthorizationError, NotGuardian, NotManager, NotOwner
from oraclevault.core.types import normalize_address


class Role(StrEnum):
    OWNER = "owner"
    GUARDIAN = "guardian"
    MANAGER = "manager"


class Permission(StrEnum):
    ORACLE_PROPOSE = "oracle.propose"
    ORACLE_ACCEPT = "oracle.accept"
    ORACLE_REJECT = "oracle.reject"
    WHITELIST_PROPOSE = "whitelist.propose"
    WHITELIST_ACCEPT = "whitelist.accept"
    WHITELIST_REJECT = "whitelist.reject"
    WHITELIST_REMOVE = "whitelist.remove"
    FEES_SET = "fees.set"
    CAPS_SET = "caps.set"
    LIQUIDITY_MANAGE = "liquidity.manage"
    REBALANCE = "rebalance"
    OWNER_TRANSFER = "role.owner_transfer"
    MANAGER_SET = "role.manager_set"
    GUARDIAN_SET = "role.guardian_set"


_ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.OWNER: frozenset(
        {
            Permission.ORACLE_PROPOSE,
            Permission.ORACLE_ACCEPT,
            Permission.WHITELIST_PROPOSE,
            Permission.WHITELIST_ACCEPT,
            Permission.WHITELIST_REMOVE,
            Permission.FEES_SET,
            Permission.CAPS_SET,
            Permission.OWNER_TRANSFER,
            Permission.MANAGER_SET,
        }
    ),
    Role.GUARDIAN: frozenset(
        {
            Permission.ORACLE_REJECT,
            Permission.WHITELIST_REJECT,
            Permission.GUARDIAN_SET,
        }
    ),
    Role.MANAGER: frozenset(
        {
            Permission.LIQUIDITY_MANAGE,
            Permission.REBALANCE,
        }
    ),
}

_DENIED: dict[Role, type[AuthorizationError]] = {
    Role.OWNER: NotOwner,
    Role.GUARDIAN: NotGuardian,
    Role.MANAGER: NotManager,
}


def role_for(permission: Permission) -> Role:
    for role, perms in _ROLE_PERMISSIONS.items():
        if permission in perms:
            return role
    raise KeyError(f"unmapped permission: {permission}")


@dataclass
class RoleRegistry:
    """Current holder of each role."""

    owner: str
    guardian: str
    manager: str

    def __post_init__(self) -> None:
        self.owner = normalize_address(self.owner)
        self.guardian = normalize_address(self.guardian)
        self.manager = normalize_address(self.manager)

    def holder(self, role: Role) -> str:
        return str(getattr(self, role.value))

    def has(self, caller: str, permission: Permission) -> bool:
        return normalize_address(caller) == self.holder(role_for(permission))

    def require(self, caller: str, permission: Permission) -> None:
        if not self.has(caller, permission):
            role = role_for(permission)
            raise _DENIED[role](f"{caller} lacks {permission} (requires {role})")

    def assign(self, role: Role, new_holder: str, *, caller: str) -> str:
        """Hand a role to ``new_holder``. Returns the previous holder."""

        permission = {
            Role.OWNER: Permission.OWNER_TRANSFER,
            Role.MANAGER: Permission.MANAGER_SET,
            Role.GUARDIAN: Permission.GUARDIAN_SET,
        }[role]
        self.require(caller, permission)
        previous = self.holder(role)
        setattr(self, role.value, normalize_address(new_holder))
        return previous

    def checkpoint(self) -> tuple[str, str, str]:
        return self.owner, self.guardian, self.manager

    def rollback(self, checkpoint: tuple[str, str, str]) -> None:
        self.owner, self.guardian, self.manager = checkpoint
