"""Text cleanup for content that will be written back into WordprocessingML."""
from __future__ import annotations

import re

# XML 1.0 forbids most C0 controls; tabs and newlines are kept for run splitting.
CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

SPECIAL_CHARS = {
    "\ufeff": "",  # Byte order mark
    "\u200b": "",  # Zero-width space
}


def clean_text(text: str) -> str:
    """Strip characters that cannot appear in document text."""
    if not text:
        return text
    for original, replacement in SPECIAL_CHARS.items():
        text = text.replace(original, replacement)
    return CONTROL_CHARS_PATTERN.sub("", text)


def split_lines(text: str) -> list[str]:
    """Split text on any newline convention, dropping blank lines."""
    return [line.rstrip() for line in text.splitlines() if line.strip()]
