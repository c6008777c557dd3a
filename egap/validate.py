"""
Input validity checks.

Ingestion problems (bad vote values, missing columns, missing boundary
features) abort the run. A degenerate delegation only disqualifies itself:
the caller reports it and moves on to the next one.
"""

from __future__ import annotations

from typing import Optional

from egap.models import Delegation


class IngestionError(ValueError):
    """Raised when input records cannot be turned into districts."""

    def __init__(
        self,
        message: str,
        delegation: Optional[str] = None,
        district: Optional[str] = None,
    ):
        location = " / ".join(
            part for part in (delegation, district) if part is not None
        )
        super().__init__(f"[{location}] {message}" if location else message)
        self.delegation = delegation
        self.district = district


class DegenerateDelegationError(ValueError):
    """Raised for a delegation whose seat or vote total is zero."""

    def __init__(self, delegation: Delegation, reason: str):
        super().__init__(f"{delegation.name}: {reason}")
        self.delegation = delegation
        self.reason = reason


def validate_delegation(delegation: Delegation) -> Delegation:
    if delegation.seats == 0:
        raise DegenerateDelegationError(delegation, "no districts")
    if delegation.votes == 0:
        raise DegenerateDelegationError(delegation, "no votes recorded")
    return delegation
