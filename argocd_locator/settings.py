"""Environment-driven configuration for the Argo CD locator."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from argocd_locator.errors import ConfigurationError

_DISABLED_VALUES = {"0", "none", "off"}


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a numeric value.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be greater than zero.")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    config_file: Path
    username: str = ""
    password: str = ""
    api_timeout: float = 30.0
    instance_timeout: float | None = 60.0
    mcp_sse_port: int = 8000

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can keep Argo CD credentials in a
        local .env file without exporting them globally.
        """
        load_dotenv()

        config_file_raw = os.getenv("ARGOCD_CONFIG_FILE", "").strip()
        if not config_file_raw:
            raise ValueError("ARGOCD_CONFIG_FILE is required but was not provided.")

        api_timeout = _positive_float("API_TIMEOUT", os.getenv("API_TIMEOUT", "").strip() or "30")

        instance_timeout_raw = os.getenv("INSTANCE_TIMEOUT", "").strip() or "60"
        instance_timeout: float | None
        if instance_timeout_raw.lower() in _DISABLED_VALUES:
            instance_timeout = None
        else:
            instance_timeout = _positive_float("INSTANCE_TIMEOUT", instance_timeout_raw)

        mcp_sse_port_raw = os.getenv("MCP_SSE_PORT", "").strip() or "8000"
        try:
            mcp_sse_port = int(mcp_sse_port_raw)
        except ValueError as exc:
            raise ValueError("MCP_SSE_PORT must be an integer.") from exc
        if mcp_sse_port <= 0:
            raise ValueError("MCP_SSE_PORT must be greater than zero.")

        return cls(
            config_file=Path(config_file_raw),
            username=os.getenv("ARGOCD_USERNAME", ""),
            password=os.getenv("ARGOCD_PASSWORD", ""),
            api_timeout=api_timeout,
            instance_timeout=instance_timeout,
            mcp_sse_port=mcp_sse_port,
        )

    def load_locator_config(self) -> dict[str, Any]:
        """Read the JSON document that lists the Argo CD instances."""
        try:
            raw = self.config_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"Could not read Argo CD config file {self.config_file}: {exc}"
            ) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"Argo CD config file {self.config_file} is not valid JSON."
            ) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Argo CD config file {self.config_file} must contain a JSON object."
            )
        return data
