"""Access tiers and the row-processing cap attached to each."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Optional, Union

MAX_FREE_ROWS = 2


class AccessTier(Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED_UNPAID = "unpaid"
    AUTHENTICATED_PAID = "paid"

    @classmethod
    def from_profile(
        cls,
        authenticated: bool,
        paid_at: Optional[Union[str, datetime]] = None,
    ) -> "AccessTier":
        """
        Derive the tier from the auth/payment collaborators.

        ``paid_at`` is the opaque marker stored when the one-time payment
        succeeds; any non-empty value counts as paid.
        """
        if not authenticated:
            return cls.ANONYMOUS
        if paid_at:
            return cls.AUTHENTICATED_PAID
        return cls.AUTHENTICATED_UNPAID

    @property
    def row_cap(self) -> float:
        return _ROW_CAPS[self]

    @property
    def is_paid(self) -> bool:
        return self is AccessTier.AUTHENTICATED_PAID

    @property
    def can_export_reports(self) -> bool:
        return self.is_paid

    @property
    def limit_message(self) -> str:
        """Upgrade copy shown when the row cap truncates input."""
        return _LIMIT_MESSAGES.get(self, "")


_ROW_CAPS: dict[AccessTier, float] = {
    AccessTier.ANONYMOUS: MAX_FREE_ROWS,
    AccessTier.AUTHENTICATED_UNPAID: MAX_FREE_ROWS,
    AccessTier.AUTHENTICATED_PAID: math.inf,
}

_LIMIT_MESSAGES: dict[AccessTier, str] = {
    AccessTier.ANONYMOUS: (
        f"Demo limited to {MAX_FREE_ROWS} rows. "
        "Sign up for $1 to process unlimited data."
    ),
    AccessTier.AUTHENTICATED_UNPAID: (
        f"Preview limited to {MAX_FREE_ROWS} rows. "
        "Upgrade for $1 to process unlimited data."
    ),
}
