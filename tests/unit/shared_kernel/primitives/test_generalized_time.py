from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from accountguard.shared_kernel.primitives import (
    AccountId,
    datetime_from_epoch_millis,
    epoch_millis,
    format_generalized_time,
    parse_generalized_time,
)


def test_generalized_time_format_and_parse_use_directory_layout() -> None:
    """
    Verify generalized-time helpers use `YYYYMMDDHHMMSSZ` and drop sub-second precision.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Directory timestamps are always UTC with `Z` designator.
    Raises:
        AssertionError: If layout or parsed value differs.
    Side Effects:
        None.
    """
    value = datetime(2020, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    assert format_generalized_time(value=value) == "20200102030405Z"
    assert parse_generalized_time(raw_value="20200102030405Z") == value.replace(microsecond=0)
    assert parse_generalized_time(raw_value="20200102030405.5Z") == value.replace(
        microsecond=500000
    )


@pytest.mark.parametrize(
    "raw_value",
    ["", "2020-01-01T00:00:00Z", "20200101000000", "20201301000000Z", "20200101000000+0100"],
)
def test_parse_generalized_time_rejects_malformed_literals(raw_value: str) -> None:
    """
    Verify malformed or out-of-range literals raise `ValueError`.

    Args:
        raw_value: Malformed literal.
    Returns:
        None.
    Assumptions:
        Only UTC generalized time is supported.
    Raises:
        AssertionError: If literal is accepted.
    Side Effects:
        None.
    """
    with pytest.raises(ValueError):
        parse_generalized_time(raw_value=raw_value)


def test_format_generalized_time_rejects_non_utc_datetimes() -> None:
    """
    Verify naive and non-UTC datetimes are rejected.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If non-UTC input is accepted.
    Side Effects:
        None.
    """
    with pytest.raises(ValueError, match="timezone-aware"):
        format_generalized_time(value=datetime(2020, 1, 1))
    with pytest.raises(ValueError, match="must be UTC"):
        format_generalized_time(
            value=datetime(2020, 1, 1, tzinfo=timezone(timedelta(hours=2)))
        )


def test_epoch_millis_is_exact_and_reversible() -> None:
    """
    Verify epoch-millisecond conversion has no float rounding.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If conversion is lossy.
    Side Effects:
        None.
    """
    value = datetime(2026, 2, 14, 16, 0, 0, 123000, tzinfo=timezone.utc)
    millis = epoch_millis(value=value)

    assert millis == 1771084800123
    assert datetime_from_epoch_millis(millis=millis) == value
    assert epoch_millis(value=datetime(1970, 1, 1, 0, 0, 59, tzinfo=timezone.utc)) == 59000


def test_account_id_strips_and_rejects_blank_values() -> None:
    """
    Verify account id normalization and validation.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        None.
    Raises:
        AssertionError: If normalization is wrong or blank id is accepted.
    Side Effects:
        None.
    """
    assert str(AccountId.from_string("  uid=alice  ")) == "uid=alice"
    assert AccountId("bob") == AccountId(" bob ")
    with pytest.raises(ValueError, match="non-empty"):
        AccountId.from_string("   ")
