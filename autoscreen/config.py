from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

from .macros import DEFAULT_MACRO
from .models import DEFAULT_IMAGE_FORMAT, ImageFormat


@dataclass(frozen=True)
class CaptureSettings:
    interval_seconds: int
    screenshots_folder: Path
    default_format: ImageFormat
    default_macro: str
    start_on_launch: bool


@dataclass(frozen=True)
class FileSettings:
    screens_file: Path
    regions_file: Path
    screenshots_db: Path


@dataclass(frozen=True)
class FilterSettings:
    title_filter_enabled: bool
    title_filter_text: str


@dataclass(frozen=True)
class LabelSettings:
    enabled: bool
    text: str


@dataclass(frozen=True)
class LoggingSettings:
    directory: Path
    level: str = "INFO"


@dataclass(frozen=True)
class AppSettings:
    capture: CaptureSettings
    files: FileSettings
    filter: FilterSettings
    label: LabelSettings
    logging: LoggingSettings
    tags: Dict[str, str] = field(default_factory=dict)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    dotenv_path = Path(__file__).resolve().parents[1] / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False, encoding="utf-8-sig")

    capture = CaptureSettings(
        interval_seconds=int(os.getenv("CAPTURE_INTERVAL_SECONDS", "60")),
        screenshots_folder=Path(os.getenv("SCREENSHOTS_FOLDER", "data/screenshots")).resolve(),
        default_format=_as_format(os.getenv("DEFAULT_IMAGE_FORMAT")),
        default_macro=os.getenv("DEFAULT_MACRO", DEFAULT_MACRO),
        start_on_launch=_as_bool(os.getenv("START_ON_LAUNCH"), default=True),
    )

    files = FileSettings(
        screens_file=Path(os.getenv("SCREENS_FILE", "data/screens.xml")).resolve(),
        regions_file=Path(os.getenv("REGIONS_FILE", "data/regions.xml")).resolve(),
        screenshots_db=Path(os.getenv("SCREENSHOTS_DB", "data/screenshots.db")).resolve(),
    )

    filter_settings = FilterSettings(
        title_filter_enabled=_as_bool(os.getenv("ACTIVE_WINDOW_TITLE_FILTER", "false")),
        title_filter_text=os.getenv("ACTIVE_WINDOW_TITLE_TEXT", ""),
    )

    label = LabelSettings(
        enabled=_as_bool(os.getenv("SCREENSHOT_LABEL_ENABLED", "false")),
        text=os.getenv("SCREENSHOT_LABEL", ""),
    )

    logging_settings = LoggingSettings(
        directory=Path(os.getenv("LOG_DIR", "logs")).resolve(),
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

    return AppSettings(
        capture=capture,
        files=files,
        filter=filter_settings,
        label=label,
        logging=logging_settings,
        tags=parse_tags(os.getenv("MACRO_TAGS", "")),
    )


def parse_tags(raw: str) -> Dict[str, str]:
    """Parse ``name=value`` pairs separated by commas."""
    tags: Dict[str, str] = {}
    for chunk in raw.split(","):
        name, sep, value = chunk.partition("=")
        name = name.strip().strip("%")
        if not sep or not name:
            continue
        tags[name] = value.strip()
    return tags


def _as_format(raw: str | None) -> ImageFormat:
    if not raw:
        return DEFAULT_IMAGE_FORMAT
    return ImageFormat.from_name(raw)


def _as_bool(raw: str | None, default: bool | None = None) -> bool:
    if raw is None:
        if default is None:
            return False
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}
