"""Integration tests for raster and PDF encoding."""

import io
import re

import pytest
from PIL import Image

from exporting import export as export_module
from exporting.errors import InvalidDocument, ParseError
from exporting.exporter import create_export
from exporting.svg_document import parse_svg, scale_to_width

pytestmark = pytest.mark.skipif(
    not export_module._CAIRO_AVAILABLE, reason="libcairo is not installed"
)

RED = (255, 0, 0)


def _open(data):
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def test_png_end_to_end():
    svg = "<svg width='800' height='600'><rect width='800' height='600' fill='#336699'/></svg>"
    export = create_export("MyChart", "image/png", 400, svg)
    assert export.file_name == "MyChart.png"

    image = _open(export.to_bytes())
    assert image.format == "PNG"
    assert image.size == (400, 300)
    assert image.convert("RGB").getpixel((200, 150)) == (0x33, 0x66, 0x99)


@pytest.mark.parametrize(
    "width, height, target",
    [(800, 600, 400), (640, 480, 1000), (1000, 333, 250), (300, 700, 123), (600, 400, 77.6)],
)
def test_bitmap_size_follows_target_width(width, height, target):
    svg = f"<svg xmlns='http://www.w3.org/2000/svg' width='{width}' height='{height}'/>"
    document = parse_svg(svg)
    scale_to_width(document, target)
    with export_module.rasterize(document) as bitmap:
        assert bitmap.mode == "RGBA"
        assert bitmap.size == (round(target), round(height * target / width))


def test_tooltip_is_not_rasterized(chart_svg):
    image = _open(create_export("x", "image/png", 400, chart_svg).to_bytes()).convert("RGB")
    assert image.size == (400, 300)
    assert image.getpixel((300, 50)) == (255, 255, 255)
    assert image.getpixel((100, 250)) != RED


def test_rasterizer_never_sees_tooltip(chart_svg, monkeypatch):
    seen = []
    real_svg2png = export_module._cairosvg.svg2png

    def spy(**kwargs):
        seen.append(kwargs["bytestring"])
        return real_svg2png(**kwargs)

    monkeypatch.setattr(export_module._cairosvg, "svg2png", spy)
    create_export("x", "image/jpeg", 200, chart_svg).to_bytes()

    assert len(seen) == 1
    assert b"highcharts-tooltip" not in seen[0]


def test_offscreen_tooltip_does_not_break_export():
    svg = (
        "<svg xmlns='http://www.w3.org/2000/svg' width='800' height='600'>"
        "<rect width='800' height='600' fill='#ffffff'/>"
        "<g class='highcharts-label highcharts-tooltip' transform='translate(1e38,1e38)' "
        "style='visibility:hidden'><path d='M 3.5 0.5 L 1e38 0.5 1e38 1e38 Z'/></g>"
        "</svg>"
    )
    image = _open(create_export("x", "image/png", 200, svg).to_bytes())
    assert image.size == (200, 150)


def test_jpeg_export(chart_svg):
    export = create_export("Résumé", "image/jpeg", 100, chart_svg)
    image = _open(export.to_bytes())
    assert image.format == "JPEG"
    assert image.mode == "RGB"
    assert image.size == (100, 75)


def test_jpeg_transparent_areas_become_background():
    svg = "<svg width='100' height='100'><rect width='10' height='10' fill='#000000'/></svg>"
    image = _open(create_export("x", "image/jpeg", 100, svg).to_bytes())
    r, g, b = image.getpixel((80, 80))
    assert min(r, g, b) > 240


def test_pdf_export(chart_svg):
    export = create_export("", "application/pdf", 200, chart_svg)
    assert export.file_name == "Chart.pdf"

    data = export.to_bytes()
    assert data.startswith(b"%PDF-")
    assert len(re.findall(rb"/Type\s*/Page(?![s\w])", data)) == 1
    media_box = re.search(rb"/MediaBox\s*\[\s*0\s+0\s+([\d.]+)\s+([\d.]+)\s*\]", data)
    assert media_box is not None
    assert (float(media_box.group(1)), float(media_box.group(2))) == (200.0, 150.0)
    assert b"/Title" in data
    assert b"/Creator" in data


def test_raster_export_rejects_malformed_svg():
    export = create_export("x", "image/png", 100, "<svg width='10'")
    with pytest.raises(ParseError):
        export.to_bytes()


def test_raster_export_rejects_zero_width():
    export = create_export("x", "application/pdf", 100, "<svg width='0' height='10'/>")
    with pytest.raises(InvalidDocument):
        export.to_bytes()
