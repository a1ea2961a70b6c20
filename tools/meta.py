"""Service liveness and introspection tools."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastmcp import FastMCP

SERVICE_NAME = "StockAI"
TOOLS = ("analyze_stock", "health", "service_info")


def register(mcp: FastMCP, *, environment: str = "production") -> None:
    @mcp.tool(
        annotations={"title": "Health", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": False}
    )
    async def health() -> dict:
        """Report that the service process is alive."""
        return {
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": environment,
        }

    @mcp.tool(
        annotations={"title": "Service Info", "readOnlyHint": True, "destructiveHint": False, "idempotentHint": True, "openWorldHint": False}
    )
    async def service_info() -> dict:
        """Describe the service and the tools it exposes."""
        return {
            "service": SERVICE_NAME,
            "status": "active",
            "tools": list(TOOLS),
        }
