"""
Response channel abstraction used by ChartExport.write_to_response().
"""

import io
from typing import BinaryIO, Dict, Optional, Protocol


class ResponseChannel(Protocol):
    """Anything that can drop its state, take headers and expose a byte sink."""

    body: BinaryIO

    def clear(self) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...


class BufferedResponse:
    """In-memory response: headers in a dict, body in a BytesIO."""

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.body = io.BytesIO()

    def clear(self) -> None:
        self.headers.clear()
        self.body.seek(0)
        self.body.truncate()

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    @property
    def media_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")

    def getvalue(self) -> bytes:
        return self.body.getvalue()
