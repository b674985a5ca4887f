import pytest
from pydantic import ValidationError

from deflux.core.config import Configuration


def test_parses_canonical_keys(valid_config_text):
    cfg = Configuration.from_yaml(valid_config_text)

    assert cfg.deconz.addr == "http://10.0.0.5:80/api"
    assert cfg.deconz.api_key == "0123ABCD"
    assert cfg.influxdb2.url == "http://influx.local:8086/"
    assert cfg.influxdb2.org == "home"
    assert cfg.influxdb2.token == "s3cret"
    assert cfg.influxdb2.bucket == "sensors"
    assert cfg.influxdb2.batch_size == 50


def test_lowercase_keys_are_accepted():
    text = """
deconz:
  addr: http://gw/api
  apikey: KEY
influxdb2:
  url: http://influx/
  org: o
  token: t
  bucket: b
  batchsize: 5
"""
    cfg = Configuration.from_yaml(text)
    assert cfg.deconz.api_key == "KEY"
    assert cfg.influxdb2.batch_size == 5


def test_numeric_scalars_are_read_as_strings():
    text = """
Deconz:
  Addr: http://gw/api
  APIKey: 1234567890
Influxdb2:
  URL: http://influx/
  Org: 42
  Token: t
  Bucket: 2024
"""
    cfg = Configuration.from_yaml(text)
    assert cfg.deconz.api_key == "1234567890"
    assert cfg.influxdb2.org == "42"
    assert cfg.influxdb2.bucket == "2024"


def test_batch_size_defaults_to_20(valid_config_text):
    text = valid_config_text.replace("  BatchSize: 50\n", "")
    assert Configuration.from_yaml(text).influxdb2.batch_size == 20


def test_placeholder_values_are_accepted(valid_config_text):
    text = valid_config_text.replace("0123ABCD", "change me")
    assert Configuration.from_yaml(text).deconz.api_key == "change me"


def test_missing_section_is_an_error():
    with pytest.raises(ValidationError):
        Configuration.from_yaml("Deconz:\n  Addr: http://gw/api\n  APIKey: k\n")


def test_negative_batch_size_is_an_error(valid_config_text):
    with pytest.raises(ValidationError):
        Configuration.from_yaml(valid_config_text.replace("BatchSize: 50", "BatchSize: -1"))


@pytest.mark.parametrize("text", ["", "just a string", "- a\n- list\n"])
def test_non_mapping_is_an_error(text):
    with pytest.raises(ValueError):
        Configuration.from_yaml(text)


def test_configuration_is_immutable(valid_config_text):
    cfg = Configuration.from_yaml(valid_config_text)
    with pytest.raises(ValidationError):
        cfg.deconz.api_key = "other"


def test_to_yaml_uses_file_keys_in_order(valid_config_text):
    cfg = Configuration.from_yaml(valid_config_text)
    out = cfg.to_yaml()

    keys = [line.strip().split(":")[0] for line in out.splitlines()]
    assert keys == ["Deconz", "Addr", "APIKey", "Influxdb2", "URL", "Org", "Token", "Bucket", "BatchSize"]
    assert Configuration.from_yaml(out) == cfg
