"""Identifier validation shared by every engine and the façade."""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import InvalidFarmerId


def validate_farmer_id(farmer_id: Any) -> int:
    """Return *farmer_id* as ``int`` or raise ``InvalidFarmerId``.

    Missing, zero, negative and non-integer values are rejected.  Booleans
    are rejected too even though ``bool`` subclasses ``int``.  Digit-only
    strings (query parameters) are accepted.
    """
    if isinstance(farmer_id, bool) or farmer_id is None:
        raise InvalidFarmerId("Invalid farmer ID", {"farmer_id": farmer_id})
    if isinstance(farmer_id, str):
        if not farmer_id.strip().isdigit():
            raise InvalidFarmerId("Invalid farmer ID", {"farmer_id": farmer_id})
        farmer_id = int(farmer_id)
    if not isinstance(farmer_id, int) or farmer_id <= 0:
        raise InvalidFarmerId("Invalid farmer ID", {"farmer_id": farmer_id})
    return farmer_id
