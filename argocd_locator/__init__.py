"""
Argo CD application locator.

Finds which of the configured Argo CD instances host an application, looked up
by exact name or by label selector.
"""

from argocd_locator.errors import (
    AppFetchError,
    ArgoLocatorError,
    AuthenticationError,
    ConfigurationError,
    InvalidLookupError,
)
from argocd_locator.locator import AppLocator
from argocd_locator.models import (
    AppRecord,
    InstanceDescriptor,
    InstanceOutcome,
    LookupKey,
    MatchResult,
    OutcomeKind,
)
from argocd_locator.registry import InstanceRegistry

__all__ = [
    "AppFetchError",
    "AppLocator",
    "AppRecord",
    "ArgoLocatorError",
    "AuthenticationError",
    "ConfigurationError",
    "InstanceDescriptor",
    "InstanceOutcome",
    "InstanceRegistry",
    "InvalidLookupError",
    "LookupKey",
    "MatchResult",
    "OutcomeKind",
]
