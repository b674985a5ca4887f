from pathlib import Path

import pytest

from deflux.core.config import Settings


VALID_CONFIG = """\
Deconz:
  Addr: http://10.0.0.5:80/api
  APIKey: 0123ABCD
Influxdb2:
  URL: http://influx.local:8086/
  Org: home
  Token: s3cret
  Bucket: sensors
  BatchSize: 50
"""


@pytest.fixture
def valid_config_text() -> str:
    return VALID_CONFIG


@pytest.fixture
def workdirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Separate working directory and system config directory, cwd switched to the former."""
    cwd = tmp_path / "cwd"
    etc = tmp_path / "etc"
    cwd.mkdir()
    etc.mkdir()
    monkeypatch.chdir(cwd)
    return cwd, etc


@pytest.fixture
def test_settings(workdirs) -> Settings:
    _, etc = workdirs
    return Settings(system_config_dir=str(etc), discovery_url="http://discovery.invalid/")
