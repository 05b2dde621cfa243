"""Launch the Thali API under uvicorn using ``THALI_SERVER_*`` environment variables."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Optional

import uvicorn

APP_FACTORY = "thali.server.app:create_app"


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid THALI_SERVER_PORT '{value}': {exc}") from exc
    if not 0 < port < 65536:
        raise SystemExit("THALI_SERVER_PORT must be between 1 and 65535.")
    return port


def _parse_duration(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid THALI_SERVER_DURATION '{value}': {exc}") from exc
    if parsed <= 0:
        raise SystemExit("THALI_SERVER_DURATION must be greater than 0 when provided.")
    return parsed


def server_options(environ: Optional[dict[str, str]] = None) -> dict[str, Any]:
    """Translate environment variables into uvicorn keyword arguments."""

    env = os.environ if environ is None else environ
    return {
        "host": env.get("THALI_SERVER_HOST", "127.0.0.1"),
        "port": _parse_port(env.get("THALI_SERVER_PORT", "8000")),
        "reload": env.get("RELOAD") == "1",
        # Logging is configured by create_app from THALI_LOG_* settings.
        "log_config": None,
        "factory": True,
    }


async def _serve_for(server: uvicorn.Server, duration: float) -> None:
    async def _stop_later() -> None:
        await asyncio.sleep(duration)
        server.should_exit = True

    asyncio.create_task(_stop_later())
    await server.serve()


def main() -> None:
    options = server_options()
    duration = _parse_duration(os.environ.get("THALI_SERVER_DURATION"))

    if options["reload"]:
        if duration is not None:
            raise SystemExit("Use RELOAD=0 when specifying THALI_SERVER_DURATION.")
        uvicorn.run(APP_FACTORY, **options)
        return

    server = uvicorn.Server(uvicorn.Config(APP_FACTORY, **options))
    if duration is not None:
        asyncio.run(_serve_for(server, duration))
        return
    server.run()


if __name__ == "__main__":
    main()
