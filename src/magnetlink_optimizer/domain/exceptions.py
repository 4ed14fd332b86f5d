"""Error taxonomy shared by all layers."""

from __future__ import annotations


class MagnetOptimizerError(Exception):
    """Base class for all application errors."""


class FetchError(MagnetOptimizerError):
    """Raised when a provider page cannot be fetched (network or HTTP status)."""

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"fetch failed for {url}: {cause}")
        self.url = url
        self.cause = cause


class ParseError(MagnetOptimizerError):
    """Raised when HTML or model JSON does not have the expected shape."""


class LlmRequestError(ParseError):
    """Raised when an LLM call fails at the transport or HTTP level."""


class CountMismatchError(MagnetOptimizerError):
    """Raised when a batch analysis returns a different number of items."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"expected {expected} analysis results, got {actual}")
        self.expected = expected
        self.actual = actual


class AnalysisExhaustedError(MagnetOptimizerError):
    """Raised when every analysis attempt for a request has failed."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"analysis failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class NoProvidersError(MagnetOptimizerError):
    """Raised when a search is started without any enabled provider."""

    def __init__(
        self, message: str = "No search providers available; enable at least one"
    ) -> None:
        super().__init__(message)


class SettingsError(MagnetOptimizerError):
    """Raised for invalid settings operations (unknown id, duplicates, ...)."""
