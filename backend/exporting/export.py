"""
Export helpers: SVG → JPEG / PNG / PDF / SVG encoding.
"""

import io
import logging
from typing import TYPE_CHECKING, BinaryIO, Callable, Dict

from PIL import Image

from .errors import InvalidState
from .formats import OutputKind
from .settings import get_settings
from .svg_document import ChartDocument, parse_svg, scale_to_width

if TYPE_CHECKING:
    from .exporter import ChartExport

logger = logging.getLogger(__name__)

# cairosvg requires libcairo (a C library) to be installed on the system.
# On macOS: brew install cairo
# On Linux: apt install libcairo2
# We import lazily so SVG passthrough still works even if cairo is missing,
# and return a helpful error only when a raster/PDF export is actually attempted.
try:
    import cairosvg as _cairosvg
    _CAIRO_AVAILABLE = True
    _CAIRO_ERROR = None
except Exception as e:
    _cairosvg = None
    _CAIRO_AVAILABLE = False
    _CAIRO_ERROR = (
        f"cairosvg import failed: {e}\n"
        "JPEG/PNG/PDF export requires libcairo.\n"
        "  macOS:  brew install cairo\n"
        "  Linux:  sudo apt install libcairo2\n"
        "Use SVG export instead (no native library needed)."
    )


def rasterize(document: ChartDocument) -> Image.Image:
    """Render a scaled ChartDocument to an RGBA bitmap of its pixel size."""
    if not _CAIRO_AVAILABLE:
        raise RuntimeError(_CAIRO_ERROR)

    width, height = document.pixel_size()
    png_bytes = _cairosvg.svg2png(
        bytestring=document.to_bytes(),
        output_width=width,
        output_height=height,
    )
    with Image.open(io.BytesIO(png_bytes)) as image:
        return image.convert("RGBA")


def render_chart(svg: str, width: float) -> Image.Image:
    """Sanitize, parse and scale SVG text, then rasterize it."""
    document = parse_svg(svg)
    scale_to_width(document, width)
    return rasterize(document)


def _flatten(image: Image.Image, background: str) -> Image.Image:
    """Composite an RGBA bitmap onto an opaque background (JPEG/PDF have no alpha)."""
    flat = Image.new("RGB", image.size, background)
    flat.paste(image, (0, 0), image)
    return flat


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

def _write_svg(export: "ChartExport", sink: BinaryIO) -> None:
    # Passthrough: the original text, neither sanitized nor scaled
    sink.write(export.svg.encode("utf-8"))


def _write_jpeg(export: "ChartExport", sink: BinaryIO) -> None:
    settings = get_settings()
    with render_chart(export.svg, export.width) as bitmap:
        with _flatten(bitmap, settings.BACKGROUND_COLOR) as flat:
            flat.save(sink, format="JPEG", quality=settings.JPEG_QUALITY)


def _write_png(export: "ChartExport", sink: BinaryIO) -> None:
    # PNG is staged in memory; the encoder may seek on its output
    with render_chart(export.svg, export.width) as bitmap, io.BytesIO() as staging:
        bitmap.save(staging, format="PNG")
        sink.write(staging.getvalue())


def _write_pdf(export: "ChartExport", sink: BinaryIO) -> None:
    settings = get_settings()
    with render_chart(export.svg, export.width) as bitmap:
        with _flatten(bitmap, settings.BACKGROUND_COLOR) as flat, io.BytesIO() as staging:
            # 72 dpi: one PDF point per bitmap pixel, so the page is the bitmap's size
            flat.save(
                staging,
                format="PDF",
                resolution=72.0,
                title=export.title,
                creator=settings.PDF_CREATOR,
            )
            sink.write(staging.getvalue())


ENCODERS: Dict[OutputKind, Callable[["ChartExport", BinaryIO], None]] = {
    OutputKind.JPEG: _write_jpeg,
    OutputKind.PNG: _write_png,
    OutputKind.PDF: _write_pdf,
    OutputKind.SVG: _write_svg,
}


def encode(export: "ChartExport", sink: BinaryIO) -> None:
    """Write the export in its output format to sink, then flush it."""
    encoder = ENCODERS.get(export.output_kind)
    if encoder is None:
        raise InvalidState(f"ContentType '{export.mime_type}' is invalid.")

    logger.info(
        "export: %s, %s, width=%s, %d chars of SVG",
        export.mime_type, export.file_name, export.width, len(export.svg),
    )
    encoder(export, sink)
    sink.flush()
