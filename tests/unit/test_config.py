from __future__ import annotations

import pytest

from app.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


def test_copilot_settings_from_env(monkeypatch) -> None:
  monkeypatch.setenv("EDUASSESS_COPILOT_SUCCESS_POLICY", "Majority")
  monkeypatch.setenv("EDUASSESS_COPILOT_HISTORY_LIMIT", "0")
  monkeypatch.setenv("EDUASSESS_PUBLIC_BASE_URL", "https://eduassess.example/")
  settings = get_settings()
  assert settings.copilot_success_policy == "majority"
  assert settings.copilot_history_limit == 0
  assert settings.public_base_url == "https://eduassess.example"


@pytest.mark.parametrize(
  ("name", "value"),
  [("EDUASSESS_COPILOT_SUCCESS_POLICY", "sometimes"), ("EDUASSESS_LLM_PROVIDER", "mystery"), ("EDUASSESS_ALLOWED_ORIGINS", "*"), ("EDUASSESS_COPILOT_PREVIEW_LIMIT", "0")],
)
def test_invalid_settings_are_rejected(monkeypatch, name, value) -> None:
  monkeypatch.setenv(name, value)
  with pytest.raises(ValueError):
    get_settings()
