"""Reads configured Argo CD instances out of the locator configuration."""

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from argocd_locator.errors import ConfigurationError
from argocd_locator.http_client import is_header_safe
from argocd_locator.models import InstanceDescriptor

logger = logging.getLogger(__name__)

CONFIG_LOCATOR_TYPE = "config"


class InstanceConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    url: str
    token: str | None = None

    @field_validator("name", "url")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must be a non-empty string")
        return cleaned

    @field_validator("url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"is not a valid URL: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("must be an absolute http(s) URL with a host")
        return value

    @field_validator("token")
    @classmethod
    def _blank_token_is_absent(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        cleaned = value.strip()
        if not is_header_safe(cleaned):
            raise ValueError("must contain only printable ASCII characters")
        return cleaned


class LocatorMethodConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str
    instances: list[InstanceConfig] = Field(default_factory=list)


class LocatorConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    app_locator_methods: list[LocatorMethodConfig] = Field(alias="appLocatorMethods")


def _locator_section(config: Mapping[str, Any]) -> Any:
    # Accept both the full app config and the bare "argocd" section.
    section = config.get("argocd", config)
    if not isinstance(section, Mapping):
        raise ConfigurationError("argocd configuration must be a mapping.")
    return section


class InstanceRegistry:
    """
    Validated view over the ``argocd.appLocatorMethods`` configuration.

    Shape errors surface as ConfigurationError when the registry is built, so
    nothing downstream has to cope with half-valid instance entries.
    """

    def __init__(self, config: Mapping[str, Any]) -> None:
        self._instances = self._parse(config)

    @staticmethod
    def _parse(config: Mapping[str, Any]) -> tuple[InstanceDescriptor, ...]:
        if not isinstance(config, Mapping):
            raise ConfigurationError("Locator configuration must be a mapping.")
        try:
            parsed = LocatorConfig.model_validate(_locator_section(config))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid Argo CD instance configuration: {exc}") from exc

        descriptors: list[InstanceDescriptor] = []
        seen: set[str] = set()
        for method in parsed.app_locator_methods:
            if method.type != CONFIG_LOCATOR_TYPE:
                logger.debug("Skipping locator method", extra={"locator_type": method.type})
                continue
            for instance in method.instances:
                if instance.name in seen:
                    raise ConfigurationError(f"Duplicate Argo CD instance name: {instance.name}")
                seen.add(instance.name)
                descriptors.append(
                    InstanceDescriptor(
                        name=instance.name,
                        url=instance.url.rstrip("/"),
                        token=instance.token,
                    )
                )
        return tuple(descriptors)

    def list_instances(self) -> list[InstanceDescriptor]:
        """Return the configured instances in configuration order."""
        return list(self._instances)

    def __len__(self) -> int:
        return len(self._instances)
