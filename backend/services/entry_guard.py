"""
entry_guard.py — Create/edit gate for journal entries
Edits are never time-gated. Creations are allowed only while the
entry kind's posting window is open.
"""

from dataclasses import dataclass

from errors import WindowClosedError
from services.clock import OPEN, WindowPolicy


@dataclass(frozen=True)
class Allow:
    is_edit: bool = False

    allowed = True


@dataclass(frozen=True)
class Deny:
    reason: str
    kind: str
    status: str
    opens_at: str
    closes_at: str

    allowed = False


def authorize_post(existing_entry, status: str, policy: WindowPolicy) -> Allow | Deny:
    if existing_entry is not None:
        return Allow(is_edit=True)
    if status == OPEN:
        return Allow()
    return Deny(
        reason="window closed",
        kind=policy.kind,
        status=status,
        opens_at=policy.opens_at,
        closes_at=policy.closes_at,
    )


def ensure_post_allowed(existing_entry, status: str, policy: WindowPolicy) -> Allow:
    decision = authorize_post(existing_entry, status, policy)
    if not decision.allowed:
        raise WindowClosedError(decision.kind, decision.status, decision.opens_at, decision.closes_at)
    return decision
