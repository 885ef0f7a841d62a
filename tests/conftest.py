import pytest


@pytest.fixture(autouse=True)
def test_set_env(monkeypatch):
    monkeypatch.setenv("BROWSER_AI_API_TOKEN", "test-token")
    monkeypatch.delenv("BROWSER_AI_BASE_URL", raising=False)
    monkeypatch.delenv("BROWSER_AI_PROJECT", raising=False)
    monkeypatch.delenv("BROWSER_AI_POLL_INTERVAL", raising=False)
