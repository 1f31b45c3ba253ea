"""Pure formatting utilities for human-readable progress output.

This module provides stateless functions converting byte counts, rates and
millisecond ETAs into short strings suitable for a status line.
"""

# Binary unit constants (1024-based)
_KB = 1024.0
_MB = _KB * 1024.0
_GB = _MB * 1024.0
_TB = _GB * 1024.0

_UNITS: tuple[tuple[float, str], ...] = (
    (_TB, "TB"),
    (_GB, "GB"),
    (_MB, "MB"),
    (_KB, "KB"),
)

# Time unit constants
_MINUTE = 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24


def format_size(bytes: int, *, precision: int = 1) -> str:
    """Convert bytes to human-readable size format.

    Args:
        bytes: Number of bytes to format (must be non-negative)
        precision: Decimal places for KB and larger units

    Returns:
        Size string such as ``"512 B"`` or ``"1.5 MB"``

    Examples:
        >>> format_size(512)
        '512 B'
        >>> format_size(1536)
        '1.5 KB'
        >>> format_size(5242880)
        '5.0 MB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    for factor, unit in _UNITS:
        if bytes >= factor:
            return f"{bytes / factor:.{precision}f} {unit}"

    return f"{bytes} B"


def format_rate(bytes_per_second: float) -> str:
    """Convert bytes per second to a human-readable data rate.

    Negative inputs are clamped to zero; smoothed rates can dip a hair
    below zero through floating point error.

    Examples:
        >>> format_rate(512.0)
        '512 B/s'
        >>> format_rate(2048.5)
        '2.0 KB/s'
    """
    value = max(0.0, bytes_per_second)
    for factor, unit in _UNITS:
        if value >= factor:
            return f"{value / factor:.1f} {unit}/s"
    return f"{int(value)} B/s"


def format_eta(eta_ms: float) -> str:
    """Convert a millisecond ETA into a coarse duration string.

    An ETA of zero (or below) is the "unknown" convention used by the
    estimators and is rendered as ``"unknown"``.

    Args:
        eta_ms: Estimated remaining time in milliseconds

    Returns:
        Duration string showing at most the two most significant units

    Examples:
        >>> format_eta(0)
        'unknown'
        >>> format_eta(45_000)
        '45s'
        >>> format_eta(90_000)
        '1m 30s'
        >>> format_eta(3_665_000)
        '1h 1m'
    """
    if eta_ms <= 0:
        return "unknown"

    # Anything under a second still shows as 1s rather than 0s
    total_seconds = max(1, int(eta_ms // 1000))

    if total_seconds >= _DAY:
        days, rest = divmod(total_seconds, _DAY)
        hours = rest // _HOUR
        return f"{days}d {hours}h" if hours else f"{days}d"

    if total_seconds >= _HOUR:
        hours, rest = divmod(total_seconds, _HOUR)
        minutes = rest // _MINUTE
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"

    if total_seconds >= _MINUTE:
        minutes, seconds = divmod(total_seconds, _MINUTE)
        return f"{minutes}m {seconds}s" if seconds else f"{minutes}m"

    return f"{total_seconds}s"
