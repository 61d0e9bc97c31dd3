"""MCP tool registrations for the Argo CD locator."""

import logging
from dataclasses import dataclass
from typing import Annotated, Any

from fastmcp import FastMCP
from pydantic import Field

from argocd_locator.errors import ArgoLocatorError
from argocd_locator.locator import AppLocator

logger = logging.getLogger(__name__)


@dataclass
class LocatorToolDependencies:
    """Runtime dependencies required by the MCP tools."""

    locator: AppLocator | None = None

    def attach_locator(self, locator: AppLocator) -> None:
        self.locator = locator

    def detach_locator(self) -> None:
        self.locator = None

    def require_locator(self) -> AppLocator:
        if self.locator is None:
            raise RuntimeError("Argo CD locator is not initialized.")
        return self.locator


def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
    logger.info(
        "locator_tool_event",
        extra={"tool": tool_name, "event": event, **fields},
    )


async def find_argocd_app(
    dependencies: LocatorToolDependencies,
    *,
    name: str | None = None,
    selector: str | None = None,
) -> dict[str, Any]:
    """Run a lookup and shape the answer for MCP clients."""
    locator = dependencies.require_locator()
    try:
        matches = await locator.find_app(name=name, selector=selector)
    except ArgoLocatorError as exc:
        logger.warning("find_argocd_app rejected", exc_info=True)
        _log_tool_event("find_argocd_app", "locator_error", error=str(exc))
        return {"error": str(exc)}
    except Exception as exc:  # noqa: BLE001
        logger.exception("find_argocd_app failed unexpectedly")
        _log_tool_event("find_argocd_app", "unexpected_error", error=str(exc))
        return {"error": f"Unexpected error: {exc}"}
    _log_tool_event("find_argocd_app", "success", matches=len(matches))
    return {"instances": [match.as_dict() for match in matches]}


def register_locator_tools(
    mcp: FastMCP,
    dependencies: LocatorToolDependencies,
) -> None:
    """Register MCP tools that front the Argo CD locator."""

    @mcp.tool(
        name="find_argocd_app",
        description=(
            "Finds which configured Argo CD instances host an application. Provide exactly one "
            "of 'name' (exact application name) or 'selector' (label selector). Returns the "
            "matching instances as a list of {name, url}; unreachable instances are omitted."
        ),
    )
    async def find_argocd_app_tool(
        name: Annotated[str | None, Field(description="Exact Argo CD application name (e.g., 'checkout').")] = None,
        selector: Annotated[str | None, Field(description="Label selector (e.g., 'app.kubernetes.io/part-of=shop').")] = None,
    ) -> dict[str, Any]:
        """Return the Argo CD instances hosting the requested application."""
        return await find_argocd_app(dependencies, name=name, selector=selector)

    logger.info("Argo CD locator MCP tools registered.")
