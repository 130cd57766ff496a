from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from timetrack.config import DEFAULT_CONFIG, parse_config

TZ = timezone(timedelta(hours=2))


def at(hour: int, minute: int = 0, day: int = 6) -> datetime:
    return datetime(2024, 5, day, hour, minute, tzinfo=TZ)


@pytest.fixture
def config():
    return parse_config(DEFAULT_CONFIG)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    return path
