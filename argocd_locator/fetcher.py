"""Single-instance application queries."""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from argocd_locator.errors import AppFetchError, InvalidLookupError
from argocd_locator.http_client import response_snippet, send_request
from argocd_locator.models import AppRecord, ByName, BySelector

logger = logging.getLogger(__name__)

APPLICATIONS_PATH = "/api/v1/applications"


def _stamp_instance(payload: dict[str, Any], instance_name: str) -> None:
    """Attach the owning instance to a collection's items or to a single object."""
    items = payload.get("items")
    if isinstance(items, list):
        for item in items:
            if isinstance(item, dict):
                metadata = item.setdefault("metadata", {})
                if isinstance(metadata, dict):
                    metadata["instance"] = {"name": instance_name}
    else:
        payload["instance"] = instance_name


def _not_found_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        return data
    return {"error": True, "message": response_snippet(response)}


@dataclass(slots=True)
class ApplicationFetcher:
    """Retrieves application resources from one Argo CD instance."""

    _client: httpx.AsyncClient

    async def fetch_app(
        self,
        base_url: str,
        instance_name: str,
        lookup_key: ByName | BySelector,
        token: str,
    ) -> AppRecord:
        """
        Query an instance by exact name or label selector.

        A 404 comes back as an AppRecord flagged ``is_error`` so callers can tell
        "reachable, app absent" apart from "unreachable". Every other failure
        raises AppFetchError.
        """
        url, params = self._build_query(base_url, lookup_key)

        def _fetch_error(message: str) -> AppFetchError:
            return AppFetchError(
                f"Could not retrieve Argo CD app data from {instance_name}. {message}",
                instance_name=instance_name,
            )

        logger.debug(
            "Fetching Argo CD application",
            extra={"instance": instance_name, "url": url, "params": params},
        )
        response = await send_request(
            self._client,
            "GET",
            url,
            error_factory=_fetch_error,
            params=params,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
        )

        if response.status_code == 404:
            logger.debug("Application not found", extra={"instance": instance_name})
            return AppRecord(
                instance_name=instance_name,
                payload=_not_found_payload(response),
                status_code=404,
            )

        if response.is_error:
            snippet = response_snippet(response)
            logger.warning(
                "Argo CD responded with error",
                extra={
                    "instance": instance_name,
                    "status_code": response.status_code,
                    "content": snippet,
                },
            )
            raise _fetch_error(
                f"Argo CD error ({response.status_code}): {snippet or 'no body provided.'}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise _fetch_error("Argo CD returned invalid JSON.") from exc
        if not isinstance(payload, dict):
            raise _fetch_error("Argo CD returned an unexpected payload shape.")

        _stamp_instance(payload, instance_name)
        return AppRecord(
            instance_name=instance_name,
            payload=payload,
            status_code=response.status_code,
        )

    @staticmethod
    def _build_query(
        base_url: str,
        lookup_key: ByName | BySelector,
    ) -> tuple[str, dict[str, str] | None]:
        root = f"{base_url.rstrip('/')}{APPLICATIONS_PATH}"
        if isinstance(lookup_key, ByName):
            return f"{root}/{quote(lookup_key.name, safe='')}", None
        if isinstance(lookup_key, BySelector):
            return root, {"selector": lookup_key.selector}
        raise InvalidLookupError(f"Unsupported lookup key: {lookup_key!r}")
