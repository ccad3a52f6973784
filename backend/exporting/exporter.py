"""
Chart export request: validated once at construction, then written to a
response channel or a raw binary sink.
"""

import io
import math
from dataclasses import dataclass
from typing import BinaryIO, Optional, Union
from urllib.parse import quote

from .export import encode
from .formats import OutputKind, lookup_output_kind
from .response import ResponseChannel

# Default file name to use for chart exports if not otherwise specified
DEFAULT_FILE_NAME = "Chart"

# RFC 5987 attr-chars that may appear literally in filename*
_ATTR_CHARS = "!#$&+^`|~"


def build_content_disposition(file_name: str, extension: str) -> str:
    """Content-Disposition value with an ASCII fallback and a UTF-8 real name."""
    fallback = f"{DEFAULT_FILE_NAME}.{extension}"
    encoded = quote(file_name, safe=_ATTR_CHARS, encoding="utf-8")
    return f"attachment; filename={fallback}; filename*=UTF-8''{encoded}"


@dataclass(frozen=True)
class ChartExport:
    name: str
    output_kind: OutputKind
    mime_type: str
    width: Union[int, float]
    svg: str
    file_name: str
    content_disposition: str

    @property
    def file_extension(self) -> str:
        return self.output_kind.extension

    @property
    def title(self) -> str:
        return self.name or DEFAULT_FILE_NAME

    def write_to_stream(self, sink: BinaryIO) -> None:
        """Write the encoded chart to sink. No headers are touched."""
        encode(self, sink)

    def write_to_response(self, channel: ResponseChannel) -> None:
        """Reset channel, set the download headers and write the chart body."""
        channel.clear()
        channel.set_header("Content-Type", self.mime_type)
        channel.set_header("Content-Disposition", self.content_disposition)
        self.write_to_stream(channel.body)

    def to_bytes(self) -> bytes:
        with io.BytesIO() as buffer:
            self.write_to_stream(buffer)
            return buffer.getvalue()


def create_export(
    file_name: Optional[str],
    mime_type: str,
    width: Union[int, float],
    svg: str,
) -> ChartExport:
    """Validate an export request.

    Raises UnsupportedFormat for an unknown MIME type and ValueError for a
    non-positive width or non-text SVG.
    """
    kind = lookup_output_kind(mime_type)

    if isinstance(width, bool) or not isinstance(width, (int, float)):
        raise ValueError(f"width must be a number, got {width!r}")
    if not math.isfinite(width) or width <= 0:
        raise ValueError(f"width must be positive, got {width!r}")
    if not isinstance(svg, str):
        raise ValueError("svg must be text")

    name = file_name or ""
    full_name = f"{name or DEFAULT_FILE_NAME}.{kind.extension}"
    return ChartExport(
        name=name,
        output_kind=kind,
        mime_type=kind.mime_type,
        width=width,
        svg=svg,
        file_name=full_name,
        content_disposition=build_content_disposition(full_name, kind.extension),
    )
