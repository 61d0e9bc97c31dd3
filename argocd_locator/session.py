"""Session exchange against an Argo CD instance."""

import logging
from dataclasses import dataclass

import httpx

from argocd_locator.errors import AuthenticationError
from argocd_locator.http_client import is_header_safe, response_snippet, send_request

logger = logging.getLogger(__name__)

SESSION_PATH = "/api/v1/session"


@dataclass(slots=True)
class SessionAcquirer:
    """Obtains bearer tokens through ``POST /api/v1/session``."""

    _client: httpx.AsyncClient

    async def acquire_token(self, base_url: str, username: str, password: str) -> str:
        """Log in once and return the session token. No retries."""
        url = f"{base_url.rstrip('/')}{SESSION_PATH}"

        def _auth_error(message: str) -> AuthenticationError:
            return AuthenticationError(
                f"Could not retrieve Argo CD token for instance {base_url}. {message}",
                base_url=base_url,
            )

        logger.debug("Requesting Argo CD session", extra={"base_url": base_url})
        response = await send_request(
            self._client,
            "POST",
            url,
            error_factory=_auth_error,
            json={"username": username, "password": password},
            headers={"Content-Type": "application/json"},
        )

        if response.is_error:
            logger.warning(
                "Argo CD session request rejected",
                extra={"base_url": base_url, "status_code": response.status_code},
            )
            raise _auth_error(
                f"Session endpoint responded with {response.status_code}: "
                f"{response_snippet(response) or 'no body provided.'}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise _auth_error("Session endpoint returned invalid JSON.") from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise _auth_error("Session response did not include a token.")
        if not is_header_safe(token):
            raise _auth_error("Session token contains characters not allowed in a header.")
        return token
