from __future__ import annotations

import os
import re
from datetime import datetime
from typing import Callable, Mapping, Optional

from .models import ImageFormat

DEFAULT_MACRO = "%date%_%time%_%name%.%format%"

_TOKEN = re.compile(r"%([A-Za-z0-9_]+)%")
_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(value: str) -> str:
    return _INVALID_FILENAME_CHARS.sub("", value).strip()


def correct_folder_path(folder: str) -> str:
    """Expand ``~`` and make sure the folder ends with a path separator."""
    if not folder:
        return ""
    folder = os.path.expanduser(folder.strip())
    if not folder.endswith(("/", os.sep)):
        folder += os.sep
    return folder


class MacroParser:
    """Expands ``%token%`` macros in folder and file name templates.

    Built-in tokens cover the date and time, the target name, the image
    format, the screen component, and the active window title. User tags
    come from the ``tags`` mapping and win over built-in tokens of the same
    name. Unknown tokens are left untouched.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.now
        self._count = 0

    def parse_folder(self, template: str, tags: Mapping[str, str]) -> str:
        return self._expand(template, self._builtins(self._clock()), tags)

    def parse_name(
        self,
        name: str,
        macro: str,
        component: int,
        image_format: ImageFormat,
        title: str,
        tags: Mapping[str, str],
    ) -> str:
        self._count += 1
        values = self._builtins(self._clock())
        values.update(
            {
                "name": sanitize_filename(name),
                "format": image_format.extension,
                "screen": str(component),
                "title": sanitize_filename(title),
                "count": str(self._count),
            }
        )
        return self._expand(macro or DEFAULT_MACRO, values, tags)

    @staticmethod
    def _builtins(now: datetime) -> dict[str, str]:
        return {
            "date": now.strftime("%Y-%m-%d"),
            "time": now.strftime("%H-%M-%S-") + f"{now.microsecond // 1000:03d}",
            "year": now.strftime("%Y"),
            "month": now.strftime("%m"),
            "day": now.strftime("%d"),
            "hour": now.strftime("%H"),
            "minute": now.strftime("%M"),
            "second": now.strftime("%S"),
            "millisecond": f"{now.microsecond // 1000:03d}",
        }

    @staticmethod
    def _expand(template: str, values: Mapping[str, str], tags: Mapping[str, str]) -> str:
        def replace(match: re.Match) -> str:
            key = match.group(1)
            if key in tags:
                return tags[key]
            lowered = key.lower()
            if lowered in values:
                return values[lowered]
            return match.group(0)

        return _TOKEN.sub(replace, template or "")
