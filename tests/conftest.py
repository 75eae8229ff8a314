from collections.abc import Generator
from pathlib import Path

import pytest

from commitbot.config import ENV_OVERRIDES
from commitbot.secrets import API_KEY_ENV


@pytest.fixture(autouse=True)
def isolated_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[Path, None, None]:
    home = (tmp_path / ".commitbot").resolve()
    monkeypatch.setenv("COMMITBOT_CONFIG_HOME", str(home))
    for env_name in ENV_OVERRIDES.values():
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    yield home


# Ensure no real network calls escape during tests that don't explicitly
# replace httpx.post.
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    import httpx

    def fake_post(url, *args, **kwargs):  # noqa: D401
        raise AssertionError(f"unexpected network call to {url}")

    monkeypatch.setattr(httpx, "post", fake_post)
