from .duration import format_duration
from .filename import available_path, sanitize_filename

__all__ = ["available_path", "format_duration", "sanitize_filename"]
