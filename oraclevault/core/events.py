"""oraclevault.core.events

The event contract is the primitive.

Every successful governance or accounting transition leaves one record.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class EventType(StrEnum):
    """Canonical event type registry.

    Naming: ``{category}.{name}.{version}``.
    """

    # Oracle governance
    ORACLE_PROPOSED_V1 = "governance.oracle_proposed.v1"
    ORACLE_ACCEPTED_V1 = "governance.oracle_accepted.v1"
    ORACLE_REJECTED_V1 = "governance.oracle_rejected.v1"

    # Whitelist governance
    WHITELIST_PROPOSED_V1 = "governance.whitelist_proposed.v1"
    WHITELIST_ACCEPTED_V1 = "governance.whitelist_accepted.v1"
    WHITELIST_REJECTED_V1 = "governance.whitelist_rejected.v1"
    WHITELIST_REMOVED_V1 = "governance.whitelist_removed.v1"

    # Roles
    ROLE_CHANGED_V1 = "governance.role_changed.v1"

    # Accounting
    FEES_ACCRUED_V1 = "accounting.fees_accrued.v1"
    FEE_CONFIG_V1 = "accounting.fee_config.v1"
    CAPS_V1 = "accounting.caps.v1"
    MINT_V1 = "accounting.mint.v1"
    BURN_V1 = "accounting.burn.v1"

    # Strategy / execution
    STRATEGY_POPULATED_V1 = "execution.strategy_populated.v1"
    STRATEGY_RETRACTED_V1 = "execution.strategy_retracted.v1"
    STRATEGY_WITHDRAWN_V1 = "execution.strategy_withdrawn.v1"
    REBALANCE_V1 = "execution.rebalance.v1"


def canonical_json(data: Any) -> str:
    """Canonical JSON serialization used for hashing."""

    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_event_hash(
    *,
    prev_hash: str | None,
    event_id: str,
    event_type: EventType,
    ts: datetime,
    source: str | None,
    payload: dict[str, Any],
) -> str:
    """SHA-256 over the event header and canonical payload.

    Hash = sha256(prev_hash | ts | event_id | type | source | canonical_payload_json)
    """

    header = [prev_hash or "", ts.isoformat(), event_id, str(event_type), source or ""]
    data = "|".join(header) + "|" + canonical_json(payload)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


class Event(BaseModel):
    """Immutable journal record."""

    id: str
    seq: int
    type: EventType
    ts: datetime
    source: str | None = None
    payload: dict[str, Any]
    prev_hash: str | None = None
    hash: str

    model_config = {"frozen": True}
