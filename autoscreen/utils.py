from __future__ import annotations

import ctypes
import hashlib
import os
from pathlib import Path
from typing import Optional, Tuple

from .models import Rect


def ensure_directory(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def hash_file(path: Path) -> str:
    sha = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            sha.update(chunk)
    return sha.hexdigest()


UNKNOWN_WINDOW = "Unknown"


def get_active_window() -> Tuple[str, str]:
    """Return ``(title, process name)`` of the foreground window.

    Both are ``UNKNOWN_WINDOW`` on platforms that cannot report the
    foreground window, and empty strings when Windows has none.
    """
    if os.name != "nt":
        return UNKNOWN_WINDOW, UNKNOWN_WINDOW

    from ctypes import wintypes

    user32 = ctypes.windll.user32

    hwnd = user32.GetForegroundWindow()
    if not hwnd:
        return "", ""

    length = user32.GetWindowTextLengthW(hwnd)
    buffer = ctypes.create_unicode_buffer(length + 1)
    user32.GetWindowTextW(hwnd, buffer, length + 1)
    title = buffer.value

    pid = wintypes.DWORD()
    user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
    process_name = ""

    if pid.value:
        try:
            import psutil

            process_name = psutil.Process(pid.value).name()
        except Exception:
            process_name = f"PID-{pid.value}"
    return title, process_name


def get_active_window_rect() -> Optional[Rect]:
    if os.name != "nt":
        return None

    from ctypes import wintypes

    user32 = ctypes.windll.user32
    hwnd = user32.GetForegroundWindow()
    if not hwnd:
        return None

    rect = wintypes.RECT()
    if not user32.GetWindowRect(hwnd, ctypes.byref(rect)):
        return None
    width = rect.right - rect.left
    height = rect.bottom - rect.top
    if width <= 0 or height <= 0:
        return None
    return Rect(rect.left, rect.top, width, height)


def is_session_locked() -> bool:
    if os.name != "nt":
        return False

    if os.getenv("AUTOSCREEN_DISABLE_LOCK_CHECK", "").strip().lower() in {"1", "true", "yes", "on"}:
        return False

    # The input desktop cannot be opened while the workstation is locked.
    user32 = ctypes.windll.user32
    DESKTOP_SWITCHDESKTOP = 0x0100
    hdesktop = user32.OpenInputDesktop(0, False, DESKTOP_SWITCHDESKTOP)
    if hdesktop == 0:
        return True
    user32.CloseDesktop(hdesktop)
    return False
