"""Entry point for the Argo CD locator MCP server."""

import logging
import os
import sys

from argocd_locator.errors import ConfigurationError
from argocd_locator.server import ServerApp, build_server
from argocd_locator.settings import Settings

logger = logging.getLogger("argocd-locator")


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _prepare_server() -> tuple[Settings, ServerApp]:
    """Load settings and the instance list; bad configuration exits with status 2."""
    try:
        settings = Settings.load()
        server = build_server(settings)
        server.startup()
    except (ValueError, ConfigurationError) as exc:
        logger.error("Invalid Argo CD locator configuration: %s", exc)
        sys.exit(2)

    instances = server.instances
    if not instances:
        logger.warning("No Argo CD instances configured; every lookup will return an empty list.")
    for instance in instances:
        logger.info(
            "Argo CD instance %s at %s (%s)",
            instance.name,
            instance.url,
            "pre-shared token" if instance.token else "session login",
        )
    return settings, server


def main() -> None:
    """Validate configuration, then run the SSE server until interrupted."""
    _configure_logging()
    settings, server = _prepare_server()

    try:
        logger.info(
            "MCP SSE server ready at http://localhost:%s/sse",
            settings.mcp_sse_port,
        )
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutdown requested (Ctrl+C).")
    finally:
        server.shutdown()
        logger.info("Server shutdown complete.")


if __name__ == "__main__":
    main()
