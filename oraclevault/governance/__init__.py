"""oraclevault.governance

Who may change what, and how long everyone gets to object first.
"""

from __future__ import annotations

from oraclevault.governance.oracle import OracleConfig, OracleEngine
from oraclevault.governance.roles import Permission, Role, RoleRegistry
from oraclevault.governance.timelock import GovernanceTimelock, TimelockedProposal, is_locked
from oraclevault.governance.whitelist import Whitelist, WhitelistEntry

__all__ = [
    "GovernanceTimelock",
    "OracleConfig",
    "OracleEngine",
    "Permission",
    "Role",
    "RoleRegistry",
    "TimelockedProposal",
    "Whitelist",
    "WhitelistEntry",
    "is_locked",
]
