"""
Output formats the exporter can produce, keyed by MIME type.
"""

from enum import Enum
from typing import Dict, Optional

from .errors import UnsupportedFormat


class OutputKind(Enum):
    JPEG = ("image/jpeg", "jpg", True)
    PNG = ("image/png", "png", True)
    PDF = ("application/pdf", "pdf", True)
    SVG = ("image/svg+xml", "svg", False)

    def __init__(self, mime_type: str, extension: str, rasterized: bool):
        self.mime_type = mime_type
        self.extension = extension
        self.rasterized = rasterized


MIME_TYPES: Dict[str, OutputKind] = {kind.mime_type: kind for kind in OutputKind}


def lookup_output_kind(mime_type: Optional[str]) -> OutputKind:
    """Map a MIME type (any case) to its OutputKind."""
    if not isinstance(mime_type, str):
        raise UnsupportedFormat(mime_type)
    kind = MIME_TYPES.get(mime_type.lower())
    if kind is None:
        raise UnsupportedFormat(mime_type)
    return kind
