from __future__ import annotations

import pytest

from cero.apps.api import deps


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CERO_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("CERO_LLM_PROVIDER", "off")
    monkeypatch.setenv("CERO_LOG_TO_FILE", "off")
    monkeypatch.setenv("CERO_CREDENTIAL_STORE", "memory")
    monkeypatch.setenv("CERO_STREAM_FRAME_DELAY_S", "0")
    monkeypatch.delenv("CERO_DEFAULT_IDENTITY", raising=False)
    monkeypatch.delenv("CERO_GOOGLE_TOKEN_PATH", raising=False)
    monkeypatch.delenv("CERO_TASKS_ENABLED", raising=False)
    deps.reset_caches()
    yield
    deps.reset_caches()
