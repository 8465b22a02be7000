"""Warranty status lifecycle.

Statuses:
- PENDING: ticket received, default for new tickets
- PROCESSING: device is with a technician
- COMPLETED: repair finished and device returned
- REJECTED: claim refused

Any status may move to any other status (COMPLETED and REJECTED are not
terminal). Entering COMPLETED stamps actual_return_date unless the same
update supplies one.
"""

from datetime import datetime
from enum import Enum
from typing import Any


class WarrantyStatus(str, Enum):
    """Warranty ticket status."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"


DEFAULT_STATUS = WarrantyStatus.PENDING


def apply_status_side_effects(patch: dict[str, Any], now: datetime) -> dict[str, Any]:
    """Return the patch with status-driven fields filled in.

    Args:
        patch: Field changes keyed by model attribute name.
        now: Timestamp to stamp when the ticket is completed.

    Returns:
        A new dict; the input is not modified.
    """
    out = dict(patch)
    if out.get("status") == WarrantyStatus.COMPLETED and not out.get("actual_return_date"):
        out["actual_return_date"] = now
    return out
