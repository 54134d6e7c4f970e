import pytest
from pydantic import ValidationError

from config import Settings


def test_defaults() -> None:
    cfg = Settings(_env_file=None)

    assert cfg.SCAN_INTERVAL_SECONDS == 60
    assert cfg.MAX_RETRIES == 3
    assert cfg.query_terms == ("iptv", "m3u", "bein", "بث مباشر")


@pytest.mark.parametrize(
    "field, value",
    [("SCAN_INTERVAL_SECONDS", 0), ("MAX_RETRIES", 0), ("API_TIMEOUT", 0)],
)
def test_rejects_non_positive_values(field, value) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: value})


def test_auth_enabled_only_with_secret() -> None:
    assert Settings(_env_file=None, API_SECRET="").auth_enabled is False
    assert Settings(_env_file=None, API_SECRET="x").auth_enabled is True
