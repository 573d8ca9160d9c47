"""Simulation time units and human-readable tick formatting."""

TICKS_PER_HOUR = 2500
TICKS_PER_DAY = 60000
DAYS_PER_QUADRUM = 15
DAYS_PER_YEAR = 60
TICKS_PER_QUADRUM = TICKS_PER_DAY * DAYS_PER_QUADRUM
TICKS_PER_YEAR = TICKS_PER_DAY * DAYS_PER_YEAR


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _plural(count: int, unit: str) -> str:
    return f"1 {unit}" if count == 1 else f"{count} {unit}s"


def format_ticks_left(ticks: int) -> str:
    """Calendar-style countdown like ``in 1 year, 2 quadrums, 3 hours``."""
    if ticks <= 0:
        return "Now"

    days = ticks // TICKS_PER_DAY
    hours = (ticks % TICKS_PER_DAY) // TICKS_PER_HOUR
    if ticks % TICKS_PER_HOUR:
        hours += 1
    if hours == 24:
        hours = 0
        days += 1

    years, rest = divmod(days, DAYS_PER_YEAR)
    quadrums, rem_days = divmod(rest, DAYS_PER_QUADRUM)

    parts: list[str] = []
    if years:
        parts.append(_plural(years, "year"))
    if quadrums:
        parts.append(_plural(quadrums, "quadrum"))
    if rem_days:
        parts.append(_plural(rem_days, "day"))
    if hours or not parts:
        parts.append(_plural(hours, "hour"))
    return "in " + ", ".join(parts)


def format_duration(ticks: float) -> str:
    """Single-unit duration: ``1.5 days``, ``3.0 hours``, ``12 minutes``."""
    days = ticks / TICKS_PER_DAY
    hours = ticks / TICKS_PER_HOUR
    minutes = ticks / (TICKS_PER_HOUR / 60)
    seconds = ticks / (TICKS_PER_HOUR / 3600)
    if days >= 1.0:
        return f"{days:.1f} days"
    if hours >= 1.0:
        return f"{hours:.1f} hours"
    if minutes >= 1.0:
        return f"{minutes:.0f} minutes"
    return f"{max(1, int(seconds))} seconds"
