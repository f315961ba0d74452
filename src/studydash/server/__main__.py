"""studydash JSON-lines server entry point.

Usage: python -m studydash.server

Reads JSON requests from stdin (one per line), writes JSON responses to stdout.
All logging goes to stderr to keep the protocol clean.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

from studydash.config.log import configure_logging
from studydash.config.settings import Settings

from .handler import ServerHandler
from .protocol import Notification, Request, Response

logger = logging.getLogger("studydash.server")


async def main(settings: Optional[Settings] = None) -> None:
    loop = asyncio.get_running_loop()
    settings = settings or Settings.load()
    configure_logging(settings.get_log_level(), log_dir=settings.data_dir / "logs")

    def write_line(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_notification(notification: Notification) -> None:
        write_line(notification.to_json_line())

    handler = ServerHandler(settings=settings, write_notification=write_notification)
    logger.info("ready (api=%s)", handler.transport.config.base_url)

    reader = asyncio.StreamReader()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)

    try:
        while True:
            line = await reader.readline()
            if not line:
                break  # stdin closed

            line_str = line.decode("utf-8", errors="replace").strip()
            if not line_str:
                continue

            try:
                msg = json.loads(line_str)
                req = Request.from_dict(msg)
            except (ValueError, TypeError, AttributeError) as e:
                write_line(Response(id=0, error=f"Invalid request: {e}").to_json_line())
                continue

            try:
                result = await handler.dispatch({"method": req.method, "params": req.params})
                resp = Response(id=req.id, result=result)
            except Exception as e:
                logger.exception("request %s (%s) failed", req.id, req.method)
                resp = Response.from_exception(req.id, e)

            write_line(resp.to_json_line())
    finally:
        await handler.close()


if __name__ == "__main__":
    asyncio.run(main())
