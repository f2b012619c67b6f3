import os
import re
import unicodedata


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """Sanitize filename for cross-platform compatibility"""
    name = unicodedata.normalize("NFKC", name)
    name = re.sub(r'[\\/:*?"<>|\x00-\x1f]', '_', name)

    windows_reserved = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    stem = os.path.splitext(name)[0]
    if stem.upper() in windows_reserved:
        name = f"_{name}"

    return name[:max_length].strip() or "download"


def available_path(directory: str, filename: str) -> str:
    """Path in directory that does not clobber an existing file: name.ext, name (1).ext, ..."""
    root, ext = os.path.splitext(filename)
    candidate = os.path.join(directory, filename)
    counter = 1
    while os.path.exists(candidate):
        candidate = os.path.join(directory, f"{root} ({counter}){ext}")
        counter += 1
    return candidate
