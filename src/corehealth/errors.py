"""Exception hierarchy for the health assistant.

None of these reach the presentation layer: the assistant engine converts
each of them into a safe default (fallback text, mock object, empty history).
"""


class HealthAssistantError(Exception):
    """Base class for health assistant errors."""

    def is_retryable(self) -> bool:
        """Override in subclasses to control retry behavior."""
        return False


class ConfigurationMissingError(HealthAssistantError):
    """No provider credential is configured."""

    def __init__(self, message: str = "no language-model credential configured"):
        super().__init__(f"Configuration missing: {message}")


class ProviderError(HealthAssistantError):
    """Language-model request failed (network, timeout, malformed reply)."""

    def __init__(self, message: str):
        super().__init__(f"Provider error: {message}")

    def is_retryable(self) -> bool:
        return True


class ProviderStatusError(ProviderError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str = ""):
        detail = f"HTTP {status_code}"
        if message:
            detail += f" ({message})"
        super().__init__(detail)
        self.status_code = status_code

    def is_retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class PersistenceReadError(HealthAssistantError):
    """Stored data could not be read or decoded."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to read '{key}': {message}")
        self.key = key


class PersistenceWriteError(HealthAssistantError):
    """Stored data could not be written."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to write '{key}': {message}")
        self.key = key
