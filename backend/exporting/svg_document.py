"""
SVG sanitize / parse / scale.

Highcharts output is parsed with defusedxml, nodes known to break the
rasterizer are stripped, and the document is rescaled to the requested
pixel width before it is handed to cairosvg.
"""

import copy
import io
import logging
import math
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeET

from .errors import InvalidDocument, ParseError

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

# Highcharts tooltip group; its huge off-canvas coordinates overflow the renderer
TOOLTIP_CLASS = "highcharts-tooltip"

# Device pixels per unit at cairosvg's default 96 dpi
PIXELS_PER_UNIT = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}

_LENGTH_RE = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px|pt|pc|in|cm|mm|%)?\s*$"
)

# Deeper trees would exhaust the recursion limit of copy and serialization
MAX_DEPTH = 500


def _format_number(value: float) -> str:
    return format(value, ".10g")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _check_depth(root: ET.Element) -> None:
    stack = [(root, 1)]
    while stack:
        element, depth = stack.pop()
        if depth > MAX_DEPTH:
            raise InvalidDocument(f"SVG is nested deeper than {MAX_DEPTH} levels")
        stack.extend((child, depth + 1) for child in element)


# ---------------------------------------------------------------------------
# Lengths
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SvgLength:
    """A width/height attribute value with its unit kept intact.

    Percentages parse but have no pixel size, so to_pixels() rejects them.
    """

    value: float
    unit: str = ""

    @classmethod
    def parse(cls, text: Optional[str], attribute: str) -> "SvgLength":
        if text is None:
            raise InvalidDocument(f"SVG root element has no {attribute} attribute")
        match = _LENGTH_RE.match(text)
        if not match:
            raise InvalidDocument(f"Unsupported SVG {attribute}: {text!r}")
        value = float(match.group(1))
        if not math.isfinite(value) or value <= 0:
            raise InvalidDocument(f"SVG {attribute} must be a positive length, got {text!r}")
        return cls(value, match.group(2) or "")

    def to_pixels(self) -> float:
        if self.unit == "%":
            raise InvalidDocument("Relative (%) dimensions cannot be scaled to a pixel width")
        return self.value * PIXELS_PER_UNIT[self.unit]

    def scaled(self, factor: float) -> "SvgLength":
        return SvgLength(self.value * factor, self.unit)

    def __str__(self) -> str:
        return f"{_format_number(self.value)}{self.unit}"


# ---------------------------------------------------------------------------
# Sanitizers
# ---------------------------------------------------------------------------

def strip_tooltip(root: ET.Element) -> int:
    """Remove every element carrying the Highcharts tooltip class.

    Returns the number of elements removed.
    """
    removed = 0
    stack = [root]
    while stack:
        parent = stack.pop()
        for child in list(parent):
            if TOOLTIP_CLASS in (child.get("class") or "").split():
                parent.remove(child)
                removed += 1
            else:
                stack.append(child)
    return removed


# Tree filters run in order on every parsed document before rendering
SANITIZERS: Tuple[Callable[[ET.Element], int], ...] = (strip_tooltip,)


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------

class ChartDocument:
    """Parsed SVG chart: root element, declared size and pending scale transforms."""

    def __init__(self, root: ET.Element):
        if _local_name(root.tag) != "svg":
            raise InvalidDocument(f"Root element must be <svg>, got <{_local_name(root.tag)}>")
        _check_depth(root)
        self.root = root
        self.width = SvgLength.parse(root.get("width"), "width")
        self.height = SvgLength.parse(root.get("height"), "height")
        # Both dimensions must resolve to device pixels
        self.intrinsic_size = (self.width.to_pixels(), self.height.to_pixels())
        self.transforms: List[float] = []

    @property
    def scale_factor(self) -> float:
        factor = 1.0
        for scale in self.transforms:
            factor *= scale
        return factor

    def pixel_size(self) -> Tuple[int, int]:
        """Rounded device-pixel size of the document as currently scaled."""
        return (
            max(1, round(self.width.to_pixels())),
            max(1, round(self.height.to_pixels())),
        )

    def to_bytes(self) -> bytes:
        """Serialize the document, applying the scale transforms to the root."""
        root = copy.deepcopy(self.root)
        root.set("width", str(self.width))
        root.set("height", str(self.height))

        factor = self.scale_factor
        if factor != 1.0:
            view_box = root.get("viewBox")
            if view_box is not None:
                root.set("viewBox", _scale_view_box(view_box, factor))
            prefix = root.tag[: -len("svg")]
            group = ET.Element(f"{prefix}g", {"transform": f"scale({_format_number(factor)})"})
            group.extend(list(root))
            root[:] = [group]

        with io.BytesIO() as buffer:
            ET.ElementTree(root).write(buffer, encoding="utf-8", xml_declaration=True)
            return buffer.getvalue()


def _scale_view_box(view_box: str, factor: float) -> str:
    parts = [p for p in re.split(r"[\s,]+", view_box.strip()) if p]
    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        numbers = []
    if len(numbers) != 4:
        raise InvalidDocument(f"Malformed viewBox: {view_box!r}")
    return " ".join(_format_number(n * factor) for n in numbers)


def _parse_xml(data: Union[str, bytes]) -> ET.Element:
    try:
        return SafeET.fromstring(data)
    except (ET.ParseError, DefusedXmlException) as exc:
        raise ParseError(f"SVG is not well-formed XML: {exc}") from exc


def parse_svg(text: str) -> ChartDocument:
    """Parse SVG text into a sanitized ChartDocument."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ParseError(f"SVG text cannot be encoded as UTF-8: {exc}") from exc

    # Already-decoded text: any encoding named in the XML declaration is ignored
    root = _parse_xml(text)
    _check_depth(root)
    for sanitize in SANITIZERS:
        removed = sanitize(root)
        if removed:
            logger.debug("%s: removed %d node(s)", sanitize.__name__, removed)

    with io.BytesIO() as buffer:
        ET.ElementTree(root).write(buffer, encoding="utf-8")
        return ChartDocument(_parse_xml(buffer.getvalue()))


def scale_to_width(document: ChartDocument, target_width: float) -> float:
    """Uniformly scale the document so it renders target_width pixels wide.

    Returns the scale factor applied.
    """
    scale = float(target_width) / document.width.to_pixels()
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidDocument(f"Cannot scale document to width {target_width!r}")

    document.transforms.append(scale)
    document.width = document.width.scaled(scale)
    document.height = document.height.scaled(scale)
    logger.debug("scaled document by %.6g to %s x %s", scale, document.width, document.height)
    return scale
