"""
Shared pytest fixtures for the autoscreen test suite.

The capture provider here is a fake that records every request, so the
engine and controller can be driven without a display. ``autoscreen.capture``
is never imported because pyautogui needs one.
"""

import logging
from datetime import datetime

import pytest

from autoscreen.engine import CaptureEngine
from autoscreen.macros import MacroParser
from autoscreen.models import Display, Rect


FIXED_NOW = datetime(2024, 5, 1, 9, 30, 15, 123000)


class FakeProvider:
    def __init__(self, title="Editor - notes.txt", process="editor.exe", display_count=2):
        self.title = title
        self.process = process
        self._display_count = display_count
        self.save_results = []
        self.missing_components = set()
        self.raise_on_capture = None
        self.captures = []
        self.saves = []

    def active_window(self):
        return self.title, self.process

    def displays(self):
        return {
            index: Display(index, Rect((index - 1) * 1920, 0, 1920, 1080))
            for index in range(1, self._display_count + 1)
        }

    def display_count(self):
        return self._display_count

    def get_screen_images(self, component, rect, mouse, resolution_ratio):
        if self.raise_on_capture is not None:
            raise self.raise_on_capture
        self.captures.append((component, rect, mouse, resolution_ratio))
        if component in self.missing_components:
            return None
        return f"image-{component}"

    def save_screenshot(self, **kwargs):
        self.saves.append(kwargs)
        if self.save_results:
            return self.save_results.pop(0)
        return True


class RecordingLog:
    def __init__(self):
        self.records = []

    def add_screenshot(self, record):
        self.records.append(record)
        return len(self.records)


@pytest.fixture
def logger():
    log = logging.getLogger("autoscreen.tests")
    log.setLevel(logging.DEBUG)
    return log


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def screenshot_log():
    return RecordingLog()


@pytest.fixture
def macro_parser():
    return MacroParser(clock=lambda: FIXED_NOW)


@pytest.fixture
def engine(provider, macro_parser, screenshot_log, logger):
    return CaptureEngine(provider, macro_parser, screenshot_log, logger)
