"""Quality rating exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound


class RatingNotFound(NotFound):
    """No rating with this id is visible to the farmer."""
