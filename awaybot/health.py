"""Read-only HTTP health endpoint."""

import time
from typing import Callable

from aiohttp import web
from loguru import logger

from awaybot.engine.context import EngineContext


class HealthServer:
    """Serves ``GET /health`` with a snapshot of process state."""

    def __init__(
        self,
        ctx: EngineContext,
        is_connected: Callable[[], bool],
        host: str = "127.0.0.1",
        port: int = 8080,
    ):
        self.ctx = ctx
        self.is_connected = is_connected
        self.host = host
        self.port = port
        self.started_at = time.monotonic()
        self.app = web.Application()
        self.app.router.add_get("/health", self.handle_health)
        self.runner: web.AppRunner | None = None

    def snapshot(self) -> dict:
        last_active = self.ctx.presence.last_owner_active_at
        return {
            "status": "ok",
            "uptimeSeconds": round(time.monotonic() - self.started_at, 1),
            "connected": self.is_connected(),
            "lastOwnerActiveAt": last_active or None,
            "ledgerEntries": len(self.ctx.ledger),
        }

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response(self.snapshot())

    async def start(self) -> None:
        """Start the health server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"Health endpoint at http://{self.host}:{self.port}/health")

    async def stop(self) -> None:
        """Stop the health server."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
