"""core.payload

Builds the immutable :class:`RequestPayload` for a single call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from recipe_bridge.core.types import Message, ProviderRouting, RequestPayload, Role

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recipe_bridge.core.types import ModelParams


def build_request_payload(
    system_message: str,
    user_message: str,
    model: str,
    defaults: ModelParams,
    overrides: Mapping[str, Any] | None = None,
) -> RequestPayload:
    """Return the request for *user_message* under *system_message*.

    Overrides win per field; fields they leave out keep *defaults*. The
    routing directive is always pinned so the gateway cannot silently answer
    from a different backend.
    """
    return RequestPayload(
        model=model,
        messages=(
            Message(role=Role.system, content=system_message),
            Message(role=Role.user, content=user_message),
        ),
        params=defaults.merged(overrides),
        provider=ProviderRouting(allow_fallbacks=False, require_parameters=True),
    )
