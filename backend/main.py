"""
Chart Export Service — FastAPI Backend
Converts SVG charts posted by the Highcharts exporting module into
JPEG / PNG / PDF / SVG downloads.
"""

import io
import logging
from typing import Optional

from fastapi import FastAPI, Form, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from exporting.errors import InvalidDocument, UnsupportedFormat
from exporting.exporter import DEFAULT_FILE_NAME, create_export
from exporting.response import BufferedResponse
from exporting.settings import get_settings

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------
settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Chart Export Service",
    version="1.0.0",
    description="Convert Highcharts SVG output into JPEG, PNG, PDF or SVG files",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ExportRequest(BaseModel):
    filename: str = Field(DEFAULT_FILE_NAME, description="File name without extension")
    type: str = Field("image/png", description="image/jpeg | image/png | application/pdf | image/svg+xml")
    width: Optional[float] = Field(None, description="Pixel width of the exported chart")
    svg: str = Field(..., description="SVG chart document")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _export_response(filename: Optional[str], mime_type: str, width: Optional[float], svg: str):
    if not svg or not svg.strip():
        raise HTTPException(status_code=400, detail="Missing SVG document")

    width = settings.DEFAULT_WIDTH if width is None else width
    if not 0 < width <= settings.MAX_WIDTH:
        raise HTTPException(
            status_code=400,
            detail=f"Width must be between 1 and {settings.MAX_WIDTH} pixels",
        )

    try:
        export = create_export(filename, mime_type, width, svg)
        channel = BufferedResponse()
        export.write_to_response(channel)
    except (UnsupportedFormat, InvalidDocument) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Export failed")
        raise HTTPException(status_code=500, detail=str(e))

    headers = {k: v for k, v in channel.headers.items() if k != "Content-Type"}
    return StreamingResponse(
        io.BytesIO(channel.getvalue()),
        media_type=channel.media_type,
        headers=headers,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/export")
def export_form(
    filename: str = Form(DEFAULT_FILE_NAME),
    type: str = Form("image/png"),
    width: Optional[float] = Form(None),
    svg: str = Form(""),
):
    """Highcharts exporting-module endpoint (form-encoded POST)."""
    return _export_response(filename, type, width, svg)


@app.post("/api/export")
def export_json(req: ExportRequest):
    """Same export as /export with a JSON body."""
    return _export_response(req.filename, req.type, req.width, req.svg)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
