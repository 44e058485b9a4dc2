from collections.abc import Callable
from pathlib import Path

import pytest

from govmocks.core.paths import DDEV_EXAMPLE, LOCAL_EXAMPLE

VALID_SOURCE = """
[openid_connect.settings.generic]
enabled = true
settings.client_id = "aabenforms-backend"
settings.client_secret = "s3cret"
settings.token_endpoint = "https://idp.example.test/token"

[serviceplatformen.settings]
cpr_endpoint = "http://localhost:8081/soap/sf1520"
"""


@pytest.fixture
def local_example() -> Path:
    return LOCAL_EXAMPLE


@pytest.fixture
def ddev_example() -> Path:
    return DDEV_EXAMPLE


@pytest.fixture
def valid_source() -> str:
    return VALID_SOURCE


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write override text to a file under tmp_path and return its path."""

    def _write(content: str, name: str = "site.overrides") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
