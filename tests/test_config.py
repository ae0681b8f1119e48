import pytest

from autoscreen.config import _as_bool, get_settings, parse_tags
from autoscreen.models import ImageFormat


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_parse_tags():
    assert parse_tags("project=apollo, %team%=blue,broken,=x") == {"project": "apollo", "team": "blue"}
    assert parse_tags("") == {}


def test_as_bool():
    assert _as_bool("Yes") is True
    assert _as_bool("0") is False
    assert _as_bool(None) is False
    assert _as_bool(None, default=True) is True


def test_settings_read_environment(fresh_settings, monkeypatch, tmp_path):
    monkeypatch.setenv("CAPTURE_INTERVAL_SECONDS", "15")
    monkeypatch.setenv("SCREENS_FILE", str(tmp_path / "s.xml"))
    monkeypatch.setenv("DEFAULT_IMAGE_FORMAT", "png")
    monkeypatch.setenv("ACTIVE_WINDOW_TITLE_FILTER", "true")
    monkeypatch.setenv("ACTIVE_WINDOW_TITLE_TEXT", "Editor")
    monkeypatch.setenv("START_ON_LAUNCH", "off")
    monkeypatch.setenv("MACRO_TAGS", "client=acme")

    settings = fresh_settings()

    assert settings.capture.interval_seconds == 15
    assert settings.capture.default_format is ImageFormat.PNG
    assert settings.capture.start_on_launch is False
    assert settings.files.screens_file == (tmp_path / "s.xml").resolve()
    assert settings.filter.title_filter_enabled is True
    assert settings.filter.title_filter_text == "Editor"
    assert settings.tags == {"client": "acme"}
