"""
Fan-out lookup of an application across every configured Argo CD instance.

Each instance is queried in its own task. Authentication failures, fetch
failures, and per-instance timeouts are turned into FAILED outcomes for that
instance only; the caller always gets the (possibly empty) list of instances
that reported a match.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Mapping
from typing import Any

import httpx

from argocd_locator.errors import AppFetchError, AuthenticationError, InvalidLookupError
from argocd_locator.fetcher import ApplicationFetcher
from argocd_locator.http_client import create_argocd_client
from argocd_locator.models import (
    ByName,
    BySelector,
    InstanceDescriptor,
    InstanceOutcome,
    LookupKey,
    MatchResult,
    OutcomeKind,
)
from argocd_locator.registry import InstanceRegistry
from argocd_locator.session import SessionAcquirer
from argocd_locator.settings import Settings

logger = logging.getLogger(__name__)


class AppLocator:
    """Answers "which of my Argo CD instances host this application?"."""

    def __init__(
        self,
        registry: InstanceRegistry,
        acquirer: SessionAcquirer,
        fetcher: ApplicationFetcher,
        *,
        username: str = "",
        password: str = "",
        instance_timeout: float | None = None,
        owned_client: httpx.AsyncClient | None = None,
    ) -> None:
        if instance_timeout is not None and instance_timeout <= 0:
            raise ValueError("instance_timeout must be greater than zero.")
        self._registry = registry
        self._acquirer = acquirer
        self._fetcher = fetcher
        self._username = username
        self._password = password
        self._instance_timeout = instance_timeout
        self._owned_client = owned_client

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        http_client: httpx.AsyncClient,
        *,
        username: str = "",
        password: str = "",
        instance_timeout: float | None = None,
    ) -> "AppLocator":
        """Wire a locator around an already-parsed configuration mapping."""
        return cls(
            InstanceRegistry(config),
            SessionAcquirer(http_client),
            ApplicationFetcher(http_client),
            username=username,
            password=password,
            instance_timeout=instance_timeout,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AppLocator":
        """Factory that builds the locator and, unless given one, its HTTP client."""
        registry = InstanceRegistry(settings.load_locator_config())
        owned_client = None
        if http_client is None:
            http_client = owned_client = create_argocd_client(settings)
        return cls(
            registry,
            SessionAcquirer(http_client),
            ApplicationFetcher(http_client),
            username=settings.username,
            password=settings.password,
            instance_timeout=settings.instance_timeout,
            owned_client=owned_client,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this locator created it."""
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None

    @property
    def instances(self) -> list[InstanceDescriptor]:
        return self._registry.list_instances()

    async def find_app(
        self,
        *,
        name: str | None = None,
        selector: str | None = None,
    ) -> list[MatchResult]:
        """Locate by name or selector; exactly one must be given."""
        return await self.locate(LookupKey.from_options(name=name, selector=selector))

    async def locate(self, lookup_key: ByName | BySelector) -> list[MatchResult]:
        """Return one MatchResult per instance that reported the application."""
        outcomes = await self.locate_outcomes(lookup_key)
        return [outcome.match for outcome in outcomes if outcome.match is not None]

    async def locate_outcomes(self, lookup_key: ByName | BySelector) -> list[InstanceOutcome]:
        """Query every instance concurrently and return their outcomes in registry order."""
        if not isinstance(lookup_key, (ByName, BySelector)):
            raise InvalidLookupError(f"Unsupported lookup key: {lookup_key!r}")

        instances = self._registry.list_instances()
        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(
                    self._bounded_unit(instance, lookup_key),
                    name=f"argocd-locate-{instance.name}",
                )
                for instance in instances
            ]
        outcomes = [task.result() for task in tasks]

        counts = Counter(outcome.kind for outcome in outcomes)
        logger.info(
            "Argo CD lookup finished",
            extra={
                "lookup": repr(lookup_key),
                "instances": len(outcomes),
                "matched": counts[OutcomeKind.MATCHED],
                "not_found": counts[OutcomeKind.NOT_FOUND],
                "failed": counts[OutcomeKind.FAILED],
            },
        )
        return outcomes

    async def _bounded_unit(
        self,
        instance: InstanceDescriptor,
        lookup_key: ByName | BySelector,
    ) -> InstanceOutcome:
        try:
            async with asyncio.timeout(self._instance_timeout):
                outcome = await self._query_instance(instance, lookup_key)
        except TimeoutError:
            logger.warning(
                "Argo CD instance did not answer in time",
                extra={"instance": instance.name, "timeout": self._instance_timeout},
            )
            outcome = InstanceOutcome.failed(instance, "timed out")
        logger.debug(
            "Argo CD instance outcome",
            extra={"instance": instance.name, "outcome": outcome.kind.value, "reason": outcome.reason},
        )
        return outcome

    async def _query_instance(
        self,
        instance: InstanceDescriptor,
        lookup_key: ByName | BySelector,
    ) -> InstanceOutcome:
        try:
            token = await self._resolve_token(instance)
            record = await self._fetcher.fetch_app(instance.url, instance.name, lookup_key, token)
        except (AuthenticationError, AppFetchError) as exc:
            return InstanceOutcome.failed(instance, str(exc))

        if record.is_error:
            return InstanceOutcome.not_found(instance, record)
        return InstanceOutcome.matched(instance, record)

    async def _resolve_token(self, instance: InstanceDescriptor) -> str:
        if instance.token:
            return instance.token
        return await self._acquirer.acquire_token(instance.url, self._username, self._password)
