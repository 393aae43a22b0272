import json
from pathlib import Path

import pytest

from jglossurl.config import (
    PRESETS,
    JGlossURLConfig,
    OutputSettings,
    generate_example_config,
    get_preset,
)


def test_defaults():
    config = JGlossURLConfig()
    assert config.servlet.servlet_url == "http://localhost:8080/jgloss-www"
    assert config.servlet.servlet_path == "/jgloss-www"
    assert config.forwarding.allowed_protocols == ["http", "https"]
    assert not config.forwarding.enable_cookie_forwarding
    assert not config.output.json


def test_dict_round_trip():
    config = get_preset("open")
    assert JGlossURLConfig.from_dict(config.to_dict()) == config


def test_from_dict_partial_and_unknown_keys():
    config = JGlossURLConfig.from_dict({
        "servlet": {"servlet_url": "http://proxy/svc", "bogus": 1},
        "forwarding": {"forward_cookies": True},
        "unknown_section": {},
    })
    assert config.servlet.servlet_url == "http://proxy/svc"
    assert not hasattr(config.servlet, "bogus")
    assert config.forwarding.forward_cookies
    assert config.servlet.servlet_name == "jgloss-www"


@pytest.mark.parametrize(
    "data",
    [{"servlet": []}, {"forwarding": "http"}, {"output": 1}],
)
def test_from_dict_rejects_non_object_sections(data):
    with pytest.raises(ValueError, match="must be an object"):
        JGlossURLConfig.from_dict(data)


def test_from_dict_rejects_non_object_document():
    with pytest.raises(ValueError, match="not list"):
        JGlossURLConfig.from_dict([])


def test_from_dict_null_section_keeps_defaults():
    assert JGlossURLConfig.from_dict({"servlet": None}) == JGlossURLConfig()


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        JGlossURLConfig.from_file(path)


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = JGlossURLConfig()
    config.forwarding.allowed_protocols = ["http"]
    config.save(path)

    assert json.loads(path.read_text())["forwarding"]["allowed_protocols"] == ["http"]
    assert JGlossURLConfig.from_file(path) == config


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        JGlossURLConfig.from_file(tmp_path / "missing.json")


def test_user_config_path_honours_xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert JGlossURLConfig.user_config_path() == tmp_path / "jglossurl" / "config.json"


@pytest.mark.parametrize("value", [None, ""])
def test_user_config_path_falls_back_to_home(tmp_path, monkeypatch, value):
    if value is None:
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    else:
        monkeypatch.setenv("XDG_CONFIG_HOME", value)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
    assert JGlossURLConfig.user_config_path() == tmp_path / ".config" / "jglossurl" / "config.json"


def test_load_user_config(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert JGlossURLConfig.load_user_config() == JGlossURLConfig()

    JGlossURLConfig(output=OutputSettings(color=False)).save(tmp_path / "jglossurl" / "config.json")
    assert not JGlossURLConfig.load_user_config().output.color


def test_forwarding_policy():
    config = get_preset("open")
    config.forwarding.allowed_protocols = ["HTTP", "ftp"]
    policy = config.forwarding_policy()
    assert policy.allowed_protocols == ["http", "ftp"]
    assert policy.enable_cookie_forwarding
    assert policy.enable_secure_insecure_form_data_forwarding


def test_get_preset_returns_copy():
    config = get_preset("strict")
    config.forwarding.allowed_protocols.append("gopher")
    config.output.json = True
    assert PRESETS["strict"].forwarding.allowed_protocols == ["http", "https"]
    assert not PRESETS["strict"].output.json


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("nope")


def test_example_config():
    data = json.loads(generate_example_config())
    assert data["servlet"]["servlet_url"].startswith("https://")
    assert data["forwarding"]["enable_cookie_forwarding"] is True
