"""
CONDUCTOR — Shared Utilities

Common utilities used across all CONDUCTOR components.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


# =============================================================================
# ID Generation
# =============================================================================
def generate_execution_id() -> str:
    """Generate a unique execution ID."""
    return f"exec_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Time Utilities
# =============================================================================
def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def format_duration(milliseconds: float) -> str:
    """Format a duration in milliseconds to a human-readable string."""
    seconds = milliseconds / 1000
    if seconds < 1:
        return f"{milliseconds:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}m"


# =============================================================================
# String Utilities
# =============================================================================
def truncate(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate text to maximum length."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
