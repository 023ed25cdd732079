import pytest

from radiomap import config
from radiomap.exceptions import ConfigError


def test_defaults():
    cfg = config.make({})
    assert cfg.mirrors == ("de1", "fr1", "nl1")
    assert cfg.station_limit == 1000
    assert cfg.bridge_port == 1981
    assert cfg.mirror_urls[0] == "https://de1.api.radio-browser.info/json"


def test_environment_overrides():
    cfg = config.make({
        "RADIOMAP_MIRRORS": "at1, de2",
        "RADIOMAP_STATION_LIMIT": "50",
        "RADIOMAP_BRIDGE_HOST": "0.0.0.0",
        "RADIOMAP_BRIDGE_PORT": "9000",
        "RADIOMAP_AUDIO_CHANNELS": "mono",
    })
    assert cfg.mirrors == ("at1", "de2")
    assert cfg.station_limit == 50
    assert cfg.bridge_host == "0.0.0.0"
    assert cfg.bridge_port == 9000
    assert cfg.audio_channels == "mono"


@pytest.mark.parametrize("environ", [
    {"RADIOMAP_MIRRORS": " , "},
    {"RADIOMAP_STATION_LIMIT": "lots"},
    {"RADIOMAP_STATION_LIMIT": "0"},
    {"RADIOMAP_BRIDGE_PORT": "70000"},
])
def test_invalid_values(environ):
    with pytest.raises(ConfigError):
        config.make(environ)
