"""Tests for access tiers and row caps."""

import math
from datetime import datetime, timezone

import pytest

from ifta_calc.access import MAX_FREE_ROWS, AccessTier


def test_free_tiers_share_the_same_cap():
    assert AccessTier.ANONYMOUS.row_cap == MAX_FREE_ROWS == 2
    assert AccessTier.AUTHENTICATED_UNPAID.row_cap == MAX_FREE_ROWS


def test_paid_tier_is_uncapped():
    assert AccessTier.AUTHENTICATED_PAID.row_cap == math.inf


@pytest.mark.parametrize(
    "authenticated, paid_at, expected",
    [
        (False, None, AccessTier.ANONYMOUS),
        (False, "2025-07-01T12:00:00Z", AccessTier.ANONYMOUS),
        (True, None, AccessTier.AUTHENTICATED_UNPAID),
        (True, "", AccessTier.AUTHENTICATED_UNPAID),
        (True, "2025-07-01T12:00:00Z", AccessTier.AUTHENTICATED_PAID),
        (True, datetime(2025, 7, 1, tzinfo=timezone.utc), AccessTier.AUTHENTICATED_PAID),
    ],
)
def test_tier_from_profile(authenticated, paid_at, expected):
    assert AccessTier.from_profile(authenticated, paid_at) is expected


def test_only_paid_tier_exports():
    assert AccessTier.AUTHENTICATED_PAID.can_export_reports
    assert not AccessTier.AUTHENTICATED_UNPAID.can_export_reports
    assert not AccessTier.ANONYMOUS.can_export_reports


def test_limit_copy_differs_but_not_the_cap():
    anon = AccessTier.ANONYMOUS.limit_message
    unpaid = AccessTier.AUTHENTICATED_UNPAID.limit_message
    assert anon.startswith("Demo limited to 2 rows")
    assert unpaid.startswith("Preview limited to 2 rows")
    assert AccessTier.AUTHENTICATED_PAID.limit_message == ""


def test_tier_values_match_cli_choices():
    assert AccessTier("paid") is AccessTier.AUTHENTICATED_PAID
    assert AccessTier("unpaid") is AccessTier.AUTHENTICATED_UNPAID
