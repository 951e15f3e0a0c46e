"""
Competitor name validation for the input form and the orchestrator.
"""

import re
from typing import List, Sequence

from config import messages
from config.settings import settings

_ALLOWED_NAME = re.compile(r"^[a-zA-Z0-9\s.-]+$")


def validate_competitor(name: str) -> str:
    """Return an error message for one slot, or "" when it is acceptable."""
    if not name:
        return ""
    if len(name) < settings.MIN_COMPETITOR_NAME_LENGTH:
        return messages.NAME_TOO_SHORT
    if not _ALLOWED_NAME.match(name):
        return messages.NAME_INVALID_CHARS
    return ""


def validate_competitors(names: Sequence[str]) -> List[str]:
    return [validate_competitor(n) for n in names]


def clean_competitors(names: Sequence[str]) -> List[str]:
    """Drop slots that are empty after trimming."""
    return [n.strip() for n in names if n and n.strip()]
