"""HTTP client factory and request helpers shared by the Argo CD wrappers."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from argocd_locator.errors import ArgoLocatorError
from argocd_locator.settings import Settings

logger = logging.getLogger(__name__)

ERROR_SNIPPET_LIMIT = 512


def create_argocd_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build an AsyncClient shared by every instance query.

    No base_url is set because each request targets a different instance.
    """
    return httpx.AsyncClient(timeout=settings.api_timeout)


def is_header_safe(value: str) -> bool:
    """Whether ``value`` can travel in an HTTP header as-is."""
    return value.isascii() and value.isprintable()


def response_snippet(response: httpx.Response) -> str:
    snippet = response.text.strip()
    if len(snippet) > ERROR_SNIPPET_LIMIT:
        snippet = f"{snippet[:ERROR_SNIPPET_LIMIT]}..."
    return snippet


async def send_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    error_factory: Callable[[str], ArgoLocatorError],
    **kwargs: Any,
) -> httpx.Response:
    """Perform a request, converting transport failures via ``error_factory``."""
    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        logger.error(
            "Argo CD request timed out",
            extra={"method": method, "url": url},
            exc_info=exc,
        )
        raise error_factory(f"Argo CD request timed out ({method} {url}).") from exc
    except httpx.RequestError as exc:
        logger.error(
            "Argo CD request failed",
            extra={"method": method, "url": url},
            exc_info=exc,
        )
        raise error_factory(f"Argo CD request failed ({method} {url}): {exc!s}") from exc
