from datetime import timedelta
from typing import Optional

UNKNOWN_LITERAL = "<unknown>"


def format_age(age: Optional[timedelta], /) -> str:
    """Formats an age the way kubectl does, keeping at most two units for short ages.

    >>> format_age(timedelta(seconds=45))
    '45s'
    >>> format_age(timedelta(minutes=5, seconds=30))
    '5m30s'
    >>> format_age(timedelta(days=3, hours=4))
    '3d4h'
    """

    if age is None:
        return UNKNOWN_LITERAL

    seconds = int(age.total_seconds())
    if seconds < 0:
        # Clock skew between the cluster and this machine
        return "0s"

    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400
    years = days // 365

    if seconds < 120:
        return f"{seconds}s"
    if minutes < 10:
        return f"{minutes}m{seconds % 60}s" if seconds % 60 else f"{minutes}m"
    if minutes < 180:
        return f"{minutes}m"
    if hours < 8:
        return f"{hours}h{minutes % 60}m" if minutes % 60 else f"{hours}h"
    if hours < 48:
        return f"{hours}h"
    if hours < 192:
        return f"{days}d{hours % 24}h" if hours % 24 else f"{days}d"
    if years < 2:
        return f"{days}d"
    if years < 8:
        return f"{years}y{days % 365}d" if days % 365 else f"{years}y"
    return f"{years}y"
