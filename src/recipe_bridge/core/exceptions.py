"""core.exceptions

Centralised exception hierarchy for *recipe_bridge*.

Every error is a tagged variant raised at the point of detection. Each class
carries three pieces of metadata so that no caller ever has to inspect the
message text:

* ``error_code`` … numeric code written to the modification audit trail
* ``http_status`` … status an HTTP layer should answer with
* ``transient`` … whether the retry policy may try the call again

Upstream HTTP failures additionally expose ``status_code`` (the status the
LLM endpoint actually returned), which is what the retry policy keys on.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import ClassVar

# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------


class RecipeBridgeError(Exception):
    """Base class for all *recipe_bridge* domain errors."""

    #: Code stored in the audit trail; 500 means "unclassified".
    error_code: ClassVar[int] = 500
    #: Default HTTP status if not overridden by subclass.
    http_status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR
    #: Whether the failure may disappear on its own.
    transient: ClassVar[bool] = False
    #: Text safe to show to end users.
    public_message: ClassVar[str] = 'Failed to modify recipe. Please try again later.'

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)

    def to_json(self) -> dict[str, dict[str, str]]:
        """Unified error body; never leaks upstream text."""
        return {'error': {'type': self.__class__.__name__, 'message': self.public_message}}


# ---------------------------------------------------------------------------
# Caller-side errors
# ---------------------------------------------------------------------------


class InvalidInputError(RecipeBridgeError):
    """Text or parameters supplied by the caller failed validation."""

    error_code: ClassVar[int] = 400
    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST
    public_message: ClassVar[str] = 'Invalid input.'

    def to_json(self) -> dict[str, dict[str, str]]:
        # Validation messages are ours, not upstream text.
        return {'error': {'type': self.__class__.__name__, 'message': str(self)}}


class PreferencesNotFoundError(RecipeBridgeError):
    """No dietary preferences are stored for the requesting user."""

    error_code: ClassVar[int] = 422
    http_status: ClassVar[HTTPStatus] = HTTPStatus.UNPROCESSABLE_ENTITY
    public_message: ClassVar[str] = 'User preferences not found. Please set your dietary preferences first.'


class ConfigurationError(RecipeBridgeError):
    """Client configuration (key, endpoint, model) is missing or malformed."""


# ---------------------------------------------------------------------------
# Upstream HTTP errors
# ---------------------------------------------------------------------------


class UpstreamHTTPError(RecipeBridgeError):
    """The LLM endpoint answered with a non-2xx status."""

    default_detail: ClassVar[str] = 'Unknown error'

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail or self.default_detail
        super().__init__(self._format())

    def _format(self) -> str:
        return f'HTTP {self.status_code}: {self.detail}'


class UpstreamAuthError(UpstreamHTTPError):
    """The credential was rejected (401)."""

    error_code: ClassVar[int] = 401
    http_status: ClassVar[HTTPStatus] = HTTPStatus.SERVICE_UNAVAILABLE
    public_message: ClassVar[str] = 'AI service authentication failed'
    default_detail: ClassVar[str] = 'Invalid API key'

    def _format(self) -> str:
        return f'Authentication failed: {self.detail}'


class RateLimitExceededError(UpstreamHTTPError):
    """Provider rate limit persisted beyond the retry strategy (429)."""

    error_code: ClassVar[int] = 429
    http_status: ClassVar[HTTPStatus] = HTTPStatus.TOO_MANY_REQUESTS
    public_message: ClassVar[str] = 'AI service is busy. Please try again later.'
    default_detail: ClassVar[str] = 'Too many requests'

    def _format(self) -> str:
        return f'Rate limit exceeded: {self.detail}'


class UpstreamBadRequestError(UpstreamHTTPError):
    """The endpoint refused the request body (400)."""

    default_detail: ClassVar[str] = 'Invalid request format'

    def _format(self) -> str:
        return f'Bad request: {self.detail}'


class UpstreamServerError(UpstreamHTTPError):
    """The endpoint failed with a 5xx status after all retries."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.SERVICE_UNAVAILABLE
    default_detail: ClassVar[str] = 'Internal server error'

    def _format(self) -> str:
        return f'Server error: {self.detail}'


def error_for_status(status_code: int, detail: str | None = None) -> UpstreamHTTPError:
    """Return the typed error matching an upstream *status_code*."""
    if status_code == HTTPStatus.UNAUTHORIZED:
        return UpstreamAuthError(status_code, detail)
    if status_code == HTTPStatus.TOO_MANY_REQUESTS:
        return RateLimitExceededError(status_code, detail)
    if status_code == HTTPStatus.BAD_REQUEST:
        return UpstreamBadRequestError(status_code, detail)
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return UpstreamServerError(status_code, detail)
    return UpstreamHTTPError(status_code, detail)


# ---------------------------------------------------------------------------
# Transport and response errors
# ---------------------------------------------------------------------------


class UpstreamTimeoutError(RecipeBridgeError):
    """A single attempt exceeded its wall-clock timeout."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.SERVICE_UNAVAILABLE
    transient: ClassVar[bool] = True


class UpstreamConnectionError(RecipeBridgeError):
    """The request never produced an HTTP response (DNS, refused, reset...)."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.SERVICE_UNAVAILABLE
    transient: ClassVar[bool] = True


class InvalidResponseError(RecipeBridgeError):
    """A 2xx response did not have the expected shape."""


class EmptyResponseError(InvalidResponseError):
    """The model answered, but with empty or whitespace-only content."""


def classify_error(exc: BaseException) -> int:
    """Map any exception onto the audit taxonomy (400/401/422/429/500)."""
    if isinstance(exc, RecipeBridgeError):
        return exc.error_code
    return 500
