import hashlib
import os

import pytest

from autoscreen.engine import CaptureContext, CaptureOptions
from autoscreen.models import Screen
from autoscreen.utils import UNKNOWN_WINDOW, ensure_directory, get_active_window, hash_file

posix_only = pytest.mark.skipif(os.name == "nt", reason="foreground window is queryable on Windows")


@posix_only
def test_active_window_is_unknown_without_a_window_api():
    assert get_active_window() == (UNKNOWN_WINDOW, UNKNOWN_WINDOW)


@posix_only
def test_unknown_window_still_lets_displays_be_captured(engine, provider):
    title, process_name = get_active_window()
    context = CaptureContext(active_window_title=title, active_window_process_name=process_name)

    result = engine.run_screen_pass([Screen(name="Screen 1", component=1, active=True)], context, CaptureOptions())

    assert result.attempted == 1
    assert result.captured == 1
    assert provider.saves[0]["window_title"] == UNKNOWN_WINDOW


def test_hash_file_and_ensure_directory(tmp_path):
    folder = ensure_directory(tmp_path / "a" / "b")
    target = folder / "shot.png"
    target.write_bytes(b"pixels")

    assert folder.is_dir()
    assert hash_file(target) == hashlib.sha256(b"pixels").hexdigest()
