import math


def format_duration(duration_ms: float) -> str:
    """Human-readable duration: `850ms`, `2.35s`, `12.5s`, `1m 5.0s`, `3m 20s`."""
    if duration_ms is None or not math.isfinite(duration_ms) or duration_ms <= 0:
        return "0ms"

    if duration_ms < 1000:
        return f"{round(duration_ms)}ms"

    seconds = duration_ms / 1000
    if seconds < 60:
        precision = 1 if seconds >= 10 else 2
        return f"{seconds:.{precision}f}s"

    minutes = int(seconds // 60)
    remaining = seconds % 60
    seconds_part = f"{remaining:.0f}" if remaining >= 10 else f"{remaining:.1f}"
    return f"{minutes}m {seconds_part}s"
