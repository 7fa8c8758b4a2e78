from __future__ import annotations

import pytest

from recipe_bridge.core.model_id import is_valid_model_id


@pytest.mark.parametrize('good_id', ['gpt-4o-mini', 'GPT-4o-mini', 'claude-3.5-sonnet', 'llama_3_70b', 'a'])
def test_valid_ids(good_id: str) -> None:
    assert is_valid_model_id(good_id)


@pytest.mark.parametrize('bad_id', ['', ' ', 'openai/gpt-4o', 'gpt 4o', 'gpt-4o\n', 'model:v1', None, 42])
def test_invalid_ids(bad_id: object) -> None:
    assert not is_valid_model_id(bad_id)
