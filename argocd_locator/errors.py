"""Exception hierarchy for the Argo CD locator."""


class ArgoLocatorError(RuntimeError):
    """Base class for every locator failure."""


class ConfigurationError(ArgoLocatorError):
    """The instance configuration is missing required fields or is malformed."""


class InvalidLookupError(ArgoLocatorError, ValueError):
    """The lookup key carries neither (or both) of name and selector."""


class AuthenticationError(ArgoLocatorError):
    """The session exchange with an instance did not yield a token."""

    def __init__(self, message: str, *, base_url: str) -> None:
        super().__init__(message)
        self.base_url = base_url


class AppFetchError(ArgoLocatorError):
    """Application data could not be retrieved from an instance."""

    def __init__(self, message: str, *, instance_name: str) -> None:
        super().__init__(message)
        self.instance_name = instance_name
