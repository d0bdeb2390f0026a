import re
import uuid

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\s.-]")
_EXTENSION = re.compile(r"\.[^/.]+$")


def original_title(filename: str, default: str = "Document") -> str:
    """Derive a display title from an uploaded filename: no extension, safe chars only."""
    stem = _EXTENSION.sub("", filename.strip())
    cleaned = _UNSAFE_CHARS.sub("_", stem).strip()
    return cleaned or default


def segment_filename(original_name: str, index: int) -> str:
    """Globally unique filename for segment ``index`` (1-based) of ``original_name``."""
    base = original_title(original_name).replace(" ", "_")
    return f"{base}_segment_{index:02d}_{uuid.uuid4().hex[:8]}.pdf"


def segment_title(original_name: str, index: int) -> str:
    return f"{original_name} - Segment {index}"
