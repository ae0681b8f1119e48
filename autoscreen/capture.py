from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple
from uuid import UUID

import mss
import pyautogui
from PIL import Image, ImageDraw

from .engine import REGION_COMPONENT, ScreenshotLog
from .models import Display, ImageFormat, Rect, ScreenshotRecord, ScreenshotType
from .utils import ensure_directory, get_active_window, get_active_window_rect, hash_file

pyautogui.FAILSAFE = False

_CURSOR_SHAPE = ((0, 0), (0, 16), (4, 12), (7, 19), (10, 18), (7, 11), (12, 11))


class ScreenCapture:
    """Grabs displays, the active window, or regions and writes them with Pillow."""

    def __init__(self, log):
        self._logger = log

    def active_window(self) -> Tuple[str, str]:
        return get_active_window()

    def displays(self) -> Dict[int, Display]:
        with mss.mss() as sct:
            # monitors[0] is the union of every display.
            return {
                index: Display(index, Rect(monitor["left"], monitor["top"], monitor["width"], monitor["height"]))
                for index, monitor in enumerate(sct.monitors[1:], start=1)
            }

    def display_count(self) -> int:
        return len(self.displays())

    def get_screen_images(
        self, component: int, rect: Optional[Rect], mouse: bool, resolution_ratio: int
    ) -> Optional[Image.Image]:
        try:
            bounds = self._resolve_bounds(component, rect)
            if bounds is None:
                self._logger.debug("Nothing to capture for component %s", component)
                return None

            with mss.mss() as sct:
                shot = sct.grab(
                    {"left": bounds.x, "top": bounds.y, "width": bounds.width, "height": bounds.height}
                )
            image = Image.frombytes("RGB", shot.size, shot.bgra, "raw", "BGRX")

            if mouse:
                self._draw_cursor(image, bounds)
            if resolution_ratio != 100:
                width = max(1, image.width * resolution_ratio // 100)
                height = max(1, image.height * resolution_ratio // 100)
                image = image.resize((width, height), Image.Resampling.LANCZOS)
            return image
        except Exception as exc:
            self._logger.warning("Failed to capture component %s: %s", component, exc)
            return None

    def save_screenshot(
        self,
        *,
        image: Image.Image,
        path: str,
        image_format: ImageFormat,
        component: int,
        screenshot_type: ScreenshotType,
        jpeg_quality: int,
        view_id: UUID,
        label: str,
        window_title: str,
        process_name: str,
        screenshot_log: ScreenshotLog,
    ) -> bool:
        target = Path(path)
        try:
            ensure_directory(target.parent)
            options = {"quality": jpeg_quality} if image_format.supports_quality else {}
            output = image.convert("RGB") if image.mode not in ("RGB", "L") else image
            output.save(target, format=image_format.value, **options)

            record = ScreenshotRecord(
                captured_at=datetime.now(),
                image_path=target,
                view_id=view_id,
                screenshot_type=screenshot_type,
                component=component,
                format=image_format,
                window_title=window_title,
                process_name=process_name,
                label=label,
                hash_digest=hash_file(target),
            )
            screenshot_log.add_screenshot(record)
        except Exception as exc:
            self._logger.warning("Failed to save screenshot %s: %s", target, exc)
            return False

        self._logger.info("Captured screenshot %s (%s)", target.name, window_title)
        return True

    def _resolve_bounds(self, component: int, rect: Optional[Rect]) -> Optional[Rect]:
        if component == REGION_COMPONENT:
            if rect is None or rect.width <= 0 or rect.height <= 0:
                return None
            return rect
        if component == 0:
            return get_active_window_rect()
        display = self.displays().get(component)
        return display.bounds if display else None

    @staticmethod
    def _draw_cursor(image: Image.Image, bounds: Rect) -> None:
        x, y = pyautogui.position()
        x -= bounds.x
        y -= bounds.y
        if not (0 <= x < image.width and 0 <= y < image.height):
            return
        draw = ImageDraw.Draw(image)
        draw.polygon([(x + dx, y + dy) for dx, dy in _CURSOR_SHAPE], fill=(255, 255, 255), outline=(0, 0, 0))
