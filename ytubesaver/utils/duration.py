from typing import Optional, Union


def format_duration(seconds: Optional[Union[int, float, str]]) -> str:
    """Render seconds as H:MM:SS, or M:SS under an hour; "00:00" when unknown"""
    try:
        total = int(float(seconds))
    except (TypeError, ValueError):
        return "00:00"
    if total <= 0:
        return "00:00"

    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
