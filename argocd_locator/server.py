"""
Server bootstrap for the Argo CD locator.

Wires the FastMCP instance, the locator, and its HTTP client together and owns
their lifecycle.
"""

import asyncio
import logging

from fastmcp import FastMCP

from argocd_locator.locator import AppLocator
from argocd_locator.models import InstanceDescriptor
from argocd_locator.settings import Settings
from argocd_locator.tools import LocatorToolDependencies, register_locator_tools


class ServerApp:
    """Container for the MCP server and the locator it fronts."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._locator: AppLocator | None = None
        self._tool_dependencies = LocatorToolDependencies()
        self._mcp_app = FastMCP(
            name="Argo CD Locator MCP Server",
            instructions=(
                "Find which configured Argo CD instances host an application, by name or label selector."
            ),
        )
        register_locator_tools(self._mcp_app, self._tool_dependencies)

    def startup(self) -> None:
        """Validate configuration and build the locator before serving."""
        self._logger.info("Starting server bootstrap")
        self._locator = AppLocator.from_settings(self._settings)
        self._logger.info(
            "Argo CD instances loaded",
            extra={"instance_count": len(self._locator.instances)},
        )
        self._tool_dependencies.attach_locator(self._locator)

    def shutdown(self) -> None:
        """Release acquired resources."""
        asyncio.run(self.ashutdown())

    async def ashutdown(self) -> None:
        """Release acquired resources from inside a running event loop."""
        self._logger.info("Shutting down server bootstrap")
        self._tool_dependencies.detach_locator()
        if self._locator is not None:
            await self._locator.aclose()
            self._locator = None

    def serve_forever(self) -> None:
        """Run the FastMCP SSE server until interrupted."""
        host = "0.0.0.0"
        port = self._settings.mcp_sse_port
        self._logger.info("Starting SSE transport", extra={"host": host, "port": port})
        self._mcp_app.run(transport="sse", host=host, port=port)

    async def serve_sse_async(self, host: str = "0.0.0.0") -> None:
        """Async helper for running the SSE transport (used by smoke tests)."""
        await self._mcp_app.run_http_async(
            transport="sse",
            host=host,
            port=self._settings.mcp_sse_port,
        )

    @property
    def instances(self) -> list[InstanceDescriptor]:
        """Instances served by the started locator; empty before startup."""
        if self._locator is None:
            return []
        return self._locator.instances

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
