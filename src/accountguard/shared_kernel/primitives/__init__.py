"""
Shared Kernel primitives.

This package re-exports the minimal set of cross-context primitives so that
other modules can import them from one place:

    from accountguard.shared_kernel.primitives import AccountId, format_generalized_time
"""

from .account_id import AccountId
from .generalized_time import (
    datetime_from_epoch_millis,
    ensure_utc_datetime,
    epoch_millis,
    format_generalized_time,
    parse_generalized_time,
)

__all__ = [
    "AccountId",
    "datetime_from_epoch_millis",
    "ensure_utc_datetime",
    "epoch_millis",
    "format_generalized_time",
    "parse_generalized_time",
]
