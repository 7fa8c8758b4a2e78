"""core.config

Environment-driven client configuration.

Values come from the process environment (a ``.env`` file is honoured via
python-dotenv); explicit keyword overrides always take precedence.

==========================  ================================================
Variable                    Default
==========================  ================================================
``OPENROUTER_API_KEY``      *(required)*
``OPENROUTER_ENDPOINT``     ``https://openrouter.ai/api/v1/chat/completions``
``OPENROUTER_MODEL``        ``gpt-4o-mini``
``OPENROUTER_REFERER``      ``https://localhost:3000``
``OPENROUTER_TITLE``        ``HealthyMeal App``
``OPENROUTER_TIMEOUT_SEC``  ``30``
==========================  ================================================
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import ValidationError

from recipe_bridge.core.exceptions import ConfigurationError
from recipe_bridge.core.types import ClientConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recipe_bridge.core.types import ModelParams

DEFAULT_ENDPOINT = 'https://openrouter.ai/api/v1/chat/completions'
DEFAULT_MODEL = 'gpt-4o-mini'
DEFAULT_REFERER = 'https://localhost:3000'
DEFAULT_TITLE = 'HealthyMeal App'
DEFAULT_TIMEOUT_SEC = 30.0


def load_client_config(
    *,
    api_key: str | None = None,
    endpoint: str | None = None,
    default_model: str | None = None,
    model_params: ModelParams | None = None,
    referer: str | None = None,
    title: str | None = None,
    timeout_sec: float | None = None,
) -> ClientConfig:
    """Return a validated :class:`ClientConfig`.

    Raises
    ------
    ConfigurationError
        If no API key is available or any value fails validation.

    """
    load_dotenv()

    resolved_key = api_key or os.getenv('OPENROUTER_API_KEY')
    if not resolved_key:
        raise ConfigurationError(
            'OpenRouter API key is required. Set OPENROUTER_API_KEY environment variable or provide it in config.',
        )

    values: dict[str, Any] = {
        'api_key': resolved_key,
        'endpoint': endpoint or os.getenv('OPENROUTER_ENDPOINT', DEFAULT_ENDPOINT),
        'default_model': default_model or os.getenv('OPENROUTER_MODEL', DEFAULT_MODEL),
        'referer': referer or os.getenv('OPENROUTER_REFERER', DEFAULT_REFERER),
        'title': title or os.getenv('OPENROUTER_TITLE', DEFAULT_TITLE),
        'timeout_sec': timeout_sec if timeout_sec is not None else os.getenv('OPENROUTER_TIMEOUT_SEC', DEFAULT_TIMEOUT_SEC),
    }
    if model_params is not None:
        values['model_params'] = model_params

    return build_client_config(values)


def build_client_config(values: ClientConfig | Mapping[str, Any]) -> ClientConfig:
    """Validate *values* into a :class:`ClientConfig`, translating errors."""
    if isinstance(values, ClientConfig):
        return values
    try:
        return ClientConfig.model_validate(dict(values))
    except ValidationError as exc:
        raise ConfigurationError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    # Never echo input values: the API key may be among them.
    problems = '; '.join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    return f'Invalid client configuration ({problems})'
