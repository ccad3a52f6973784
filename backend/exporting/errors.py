"""
Exception types raised by the chart export pipeline.
"""


class ExportError(Exception):
    """Base class for every failure raised by the exporter."""


class UnsupportedFormat(ExportError, ValueError):
    """The requested MIME type is not one we can produce."""

    def __init__(self, mime_type):
        self.mime_type = mime_type
        super().__init__(f"Invalid type specified: '{mime_type}'.")


class InvalidDocument(ExportError, ValueError):
    """The SVG document cannot be scaled or rendered."""


class ParseError(InvalidDocument):
    """The SVG text is not well-formed XML."""


class InvalidState(ExportError, RuntimeError):
    """Dispatch reached an output kind outside the known set."""
