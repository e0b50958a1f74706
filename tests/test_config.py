import pytest

from inventory_monitor import config


def test_parse_id_list_trims_and_drops_blanks():
    assert config.parse_id_list(" 765611,  ,765612 ,") == ["765611", "765612"]
    assert config.parse_id_list("") == []
    assert config.parse_id_list(None) == []


def test_parse_int_falls_back_on_garbage():
    assert config._parse_int("abc", 730) == 730
    assert config._parse_int(None, 2) == 2
    assert config._parse_int("440", 730) == 440


@pytest.fixture
def valid_config(monkeypatch):
    monkeypatch.setattr(config, "STEAM_IDS", ["76561198000000001"])
    monkeypatch.setattr(config, "TOKEN", "token")
    monkeypatch.setattr(config, "CHANNEL_ID", "123")
    monkeypatch.setattr(config, "MAX_RETRIES", 3)
    monkeypatch.setattr(config, "CHECK_INTERVAL_SECONDS", 60.0)


def test_validate_accepts_complete_config(valid_config):
    config.validate()


@pytest.mark.parametrize(
    "name, value",
    [("STEAM_IDS", []), ("TOKEN", None), ("CHANNEL_ID", ""), ("MAX_RETRIES", 0), ("CHECK_INTERVAL_SECONDS", 0)],
)
def test_validate_rejects_missing_values(valid_config, monkeypatch, name, value):
    monkeypatch.setattr(config, name, value)
    with pytest.raises(config.ConfigError):
        config.validate()


def test_main_exits_when_no_accounts(valid_config, monkeypatch):
    from inventory_monitor import main

    monkeypatch.setattr(config, "STEAM_IDS", [])
    with pytest.raises(SystemExit) as excinfo:
        main.main()
    assert excinfo.value.code == 1
