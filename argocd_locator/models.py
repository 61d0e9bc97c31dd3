"""Value types shared by the registry, the HTTP wrappers, and the locator."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from argocd_locator.errors import InvalidLookupError


@dataclass(frozen=True, slots=True)
class InstanceDescriptor:
    """One configured Argo CD instance."""

    name: str
    url: str
    token: str | None = None


class LookupKey:
    """
    What to look for on each instance: either an exact application name or a
    label selector. Use ``ByName``/``BySelector`` directly, or ``from_options``
    when both optional values come from a caller.
    """

    __slots__ = ()

    @staticmethod
    def from_options(
        *,
        name: str | None = None,
        selector: str | None = None,
    ) -> "ByName | BySelector":
        name_clean = (name or "").strip()
        selector_clean = (selector or "").strip()
        if not name_clean and not selector_clean:
            raise InvalidLookupError("Neither name nor selector provided.")
        if name_clean and selector_clean:
            raise InvalidLookupError("Provide either name or selector, not both.")
        if name_clean:
            return ByName(name_clean)
        return BySelector(selector_clean)


@dataclass(frozen=True, slots=True)
class ByName(LookupKey):
    """Exact application name lookup."""

    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidLookupError("name must be a non-empty string.")


@dataclass(frozen=True, slots=True)
class BySelector(LookupKey):
    """Label selector lookup, e.g. ``app.kubernetes.io/part-of=checkout``."""

    selector: str

    def __post_init__(self) -> None:
        if not self.selector or not self.selector.strip():
            raise InvalidLookupError("selector must be a non-empty string.")


@dataclass(slots=True)
class AppRecord:
    """Raw application payload returned by one instance."""

    instance_name: str
    payload: dict[str, Any]
    status_code: int = 200

    @property
    def is_error(self) -> bool:
        # 404 bodies are passed through as data, not raised.
        return self.status_code == 404 or bool(self.payload.get("error"))


@dataclass(frozen=True, slots=True)
class MatchResult:
    """An instance that hosts the requested application."""

    name: str
    url: str

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "url": self.url}


class OutcomeKind(str, Enum):
    MATCHED = "matched"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class InstanceOutcome:
    """Result of one instance's unit of work during a locate call."""

    instance: InstanceDescriptor
    kind: OutcomeKind
    record: AppRecord | None = None
    reason: str | None = None

    @classmethod
    def matched(cls, instance: InstanceDescriptor, record: AppRecord) -> "InstanceOutcome":
        return cls(instance, OutcomeKind.MATCHED, record=record)

    @classmethod
    def not_found(cls, instance: InstanceDescriptor, record: AppRecord) -> "InstanceOutcome":
        return cls(instance, OutcomeKind.NOT_FOUND, record=record)

    @classmethod
    def failed(cls, instance: InstanceDescriptor, reason: str) -> "InstanceOutcome":
        return cls(instance, OutcomeKind.FAILED, reason=reason)

    @property
    def match(self) -> MatchResult | None:
        if self.kind is not OutcomeKind.MATCHED:
            return None
        return MatchResult(name=self.instance.name, url=self.instance.url)
