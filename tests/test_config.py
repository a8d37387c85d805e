"""Tests for connection settings."""

import pytest

from pylwrp.config import DEFAULT_HOST, DEFAULT_PORT, LwrpConfig


def test_defaults():
    config = LwrpConfig()
    assert (config.host, config.port, config.password) == (DEFAULT_HOST, DEFAULT_PORT, "")
    assert config.validate() == []


@pytest.mark.parametrize("port", [0, -1, 65536, None, "abc", True])
def test_invalid_port(port):
    problems = LwrpConfig(host="10.0.0.1", port=port).validate()
    assert len(problems) == 1
    assert "port" in problems[0]


def test_missing_host():
    assert LwrpConfig(host="").validate() == ["Missing host"]


def test_from_dict_coerces_port():
    config = LwrpConfig.from_dict({"host": " 10.0.0.1 ", "port": "93", "password": None})
    assert config == LwrpConfig(host="10.0.0.1", port=93, password="")
    assert config.validate() == []


def test_from_dict_leaves_bad_values_for_validate():
    config = LwrpConfig.from_dict({"port": "ninety"})
    assert config.host == ""
    assert len(config.validate()) == 2
