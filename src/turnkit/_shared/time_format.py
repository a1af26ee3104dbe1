# Area: Shared
"""Clock formatting helpers."""


def format_clock(seconds: float) -> str:
    """Format a duration as MM:SS. Minutes are not capped at 60."""
    total = max(0, int(seconds))
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"
