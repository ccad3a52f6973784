"""
Chart Export — CLI Bridge for desktop hosts

Reads JSON commands from stdin, exports charts with the same pipeline
as the web backend, and writes JSON results to stdout.

No FastAPI/uvicorn needed — runs as a child process of the host app.

Protocol:
  → stdin:  one JSON object per line (newline-delimited JSON)
  ← stdout: one JSON object per line as response

Commands:
  {"cmd": "export", "filename": "Sales", "type": "image/png", "width": 800, "svg": "<svg ...>"}
  {"cmd": "ping"}
"""

import sys
import json
import base64
import os
import logging

from exporting.errors import ExportError
from exporting.exporter import create_export
from exporting.response import BufferedResponse
from exporting.settings import get_settings

# ── File logger (writes to chart-export-bridge.log next to cli_bridge.py) ──
_log_dir = os.path.dirname(os.path.abspath(__file__))
_log_file = os.path.join(_log_dir, "chart-export-bridge.log")
logger = logging.getLogger("bridge")


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="[%(asctime)s] [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(_log_file, encoding="utf-8"),
        ],
    )


def handle_export(msg: dict) -> dict:
    svg = msg.get("svg") or ""
    mime_type = msg.get("type", "image/png")
    width = msg.get("width")
    if width is None:
        width = get_settings().DEFAULT_WIDTH

    logger.info("export: %s, width=%s, %d chars of SVG", mime_type, width, len(svg))

    export = create_export(msg.get("filename"), mime_type, width, svg)
    channel = BufferedResponse()
    export.write_to_response(channel)
    data = channel.getvalue()

    logger.info("export: done — %s, %d bytes", export.file_name, len(data))
    return {
        "ok": True,
        "file_name": export.file_name,
        "content_type": channel.headers["Content-Type"],
        "content_disposition": channel.headers["Content-Disposition"],
        "data_b64": base64.b64encode(data).decode("ascii"),
    }


def handle_line(line: str) -> dict:
    """Decode one request line and dispatch it to its handler."""
    try:
        msg = json.loads(line)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON input: %s", e)
        return {"ok": False, "error": f"Invalid JSON: {e}"}

    if not isinstance(msg, dict):
        return {"ok": False, "error": "Command must be a JSON object"}

    cmd = msg.get("cmd", "")
    logger.info("Received command: %s", cmd)

    try:
        if cmd == "ping":
            return {"ok": True, "pong": True}
        elif cmd == "export":
            return handle_export(msg)
        else:
            return {"ok": False, "error": f"Unknown command: {cmd}"}
    except (ExportError, ValueError) as e:
        logger.warning("Rejected %s: %s", cmd, e)
        return {"ok": False, "error": str(e)}
    except Exception as e:
        logger.exception("Unhandled exception for cmd=%s", cmd)
        return {"ok": False, "error": f"{type(e).__name__}: {e}"}


def main(stdin=sys.stdin, stdout=sys.stdout):
    logger.info("main loop starting — sending ready signal")
    # Signal ready
    stdout.write(json.dumps({"status": "ready"}) + "\n")
    stdout.flush()

    for line in stdin:
        line = line.strip()
        if not line:
            continue

        resp_json = json.dumps(handle_line(line))
        logger.info("Sending response (%d bytes)", len(resp_json))
        stdout.write(resp_json + "\n")
        stdout.flush()


if __name__ == "__main__":
    configure_logging()
    logger.info("Chart export CLI bridge starting")
    logger.info("Python %s  |  cwd: %s", sys.version.split()[0], os.getcwd())
    main()
