from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Optional


class ImageFormat(Enum):
    BMP = "BMP"
    GIF = "GIF"
    JPEG = "JPEG"
    PNG = "PNG"
    TIFF = "TIFF"

    @property
    def extension(self) -> str:
        if self is ImageFormat.JPEG:
            return "jpeg"
        return self.value.lower()

    @property
    def supports_quality(self) -> bool:
        return self is ImageFormat.JPEG

    @classmethod
    def from_name(cls, name: str) -> "ImageFormat":
        key = (name or "").strip().upper()
        if key == "JPG":
            key = "JPEG"
        if key == "TIF":
            key = "TIFF"
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown image format '{name}'") from None


DEFAULT_IMAGE_FORMAT = ImageFormat.JPEG


class ScreenshotType(IntEnum):
    ACTIVE_WINDOW = 0
    REGION = 1
    SCREEN = 2


def _check_capture_fields(jpeg_quality: int, resolution_ratio: int) -> None:
    if not 0 <= jpeg_quality <= 100:
        raise ValueError(f"jpeg_quality must be within 0..100 (got {jpeg_quality})")
    if resolution_ratio <= 0:
        raise ValueError(f"resolution_ratio must be positive (got {resolution_ratio})")


@dataclass(frozen=True)
class Screen:
    """A whole display (component > 0) or the active window (component 0)."""

    view_id: uuid.UUID = field(default_factory=uuid.uuid4)
    name: str = ""
    folder: str = ""
    macro: str = ""
    component: int = 0
    format: ImageFormat = DEFAULT_IMAGE_FORMAT
    jpeg_quality: int = 100
    resolution_ratio: int = 100
    mouse: bool = False
    active: bool = False

    def __post_init__(self) -> None:
        _check_capture_fields(self.jpeg_quality, self.resolution_ratio)

    @property
    def screenshot_type(self) -> ScreenshotType:
        if self.component == 0:
            return ScreenshotType.ACTIVE_WINDOW
        return ScreenshotType.SCREEN


@dataclass(frozen=True)
class Region:
    """An explicit rectangle in virtual-desktop coordinates."""

    view_id: uuid.UUID = field(default_factory=uuid.uuid4)
    name: str = ""
    folder: str = ""
    macro: str = ""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0
    format: ImageFormat = DEFAULT_IMAGE_FORMAT
    jpeg_quality: int = 100
    resolution_ratio: int = 100
    mouse: bool = False
    active: bool = False

    def __post_init__(self) -> None:
        _check_capture_fields(self.jpeg_quality, self.resolution_ratio)

    @property
    def rect(self) -> "Rect":
        return Rect(self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class Display:
    component: int
    bounds: Rect


@dataclass
class ScreenshotRecord:
    captured_at: datetime
    image_path: Path
    view_id: uuid.UUID
    screenshot_type: ScreenshotType
    component: int
    format: ImageFormat
    window_title: str
    process_name: str
    label: str = ""
    hash_digest: Optional[str] = None
    id: Optional[int] = None
