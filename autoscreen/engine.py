"""One capture pass per target collection per scheduling tick.

The state shared with the rest of the program travels in a
``CaptureContext``. Each pass takes one and hands back an updated copy in
its ``PassResult``. That state is the cached active window, the one-shot
force flag, and the application error flag. Nothing here is locked, so the
caller must keep passes and every other mutator on one thread.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple, Union
from uuid import UUID

from .logging_utils import log_exception
from .macros import correct_folder_path
from .models import Display, ImageFormat, Rect, Region, Screen, ScreenshotRecord, ScreenshotType

if TYPE_CHECKING:
    from PIL import Image

REGION_COMPONENT = -1


class ScreenshotLog(Protocol):
    def add_screenshot(self, record: ScreenshotRecord) -> Any: ...


class CaptureProvider(Protocol):
    def active_window(self) -> Tuple[str, str]: ...

    def displays(self) -> Dict[int, Display]: ...

    def get_screen_images(
        self, component: int, rect: Optional[Rect], mouse: bool, resolution_ratio: int
    ) -> Optional["Image.Image"]: ...

    def save_screenshot(
        self,
        *,
        image: "Image.Image",
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
    ) -> bool: ...


class MacroEngine(Protocol):
    def parse_folder(self, template: str, tags: Mapping[str, str]) -> str: ...

    def parse_name(
        self,
        name: str,
        macro: str,
        component: int,
        image_format: ImageFormat,
        title: str,
        tags: Mapping[str, str],
    ) -> str: ...


@dataclass(frozen=True)
class CaptureContext:
    force_now: bool = False
    active_window_title: str = ""
    active_window_process_name: str = ""
    application_error: bool = False


@dataclass(frozen=True)
class CaptureOptions:
    title_filter_enabled: bool = False
    title_filter_text: str = ""
    label_enabled: bool = False
    label: str = ""
    tags: Mapping[str, str] = field(default_factory=dict)

    def title_allowed(self, title: str) -> bool:
        if not self.title_filter_enabled or not self.title_filter_text:
            return True
        return self.title_filter_text.lower() in title.lower()


@dataclass
class PassResult:
    context: CaptureContext
    attempted: int = 0
    captured: int = 0
    failed: int = 0
    stopped_early: bool = False


Target = Union[Screen, Region]


class CaptureEngine:
    def __init__(
        self,
        provider: CaptureProvider,
        macro_parser: MacroEngine,
        screenshot_log: ScreenshotLog,
        logger: logging.Logger,
    ):
        self._provider = provider
        self._macros = macro_parser
        self._screenshot_log = screenshot_log
        self._logger = logger

    def run_screen_pass(
        self, screens: Iterable[Screen], context: CaptureContext, options: CaptureOptions
    ) -> PassResult:
        # A failed save stops the rest of the screens for this tick.
        return self._run_pass(screens, context, options, "CaptureEngine::run_screen_pass", stop_on_failure=True)

    def run_region_pass(
        self, regions: Iterable[Region], context: CaptureContext, options: CaptureOptions
    ) -> PassResult:
        return self._run_pass(regions, context, options, "CaptureEngine::run_region_pass", stop_on_failure=False)

    def _run_pass(
        self,
        targets: Iterable[Target],
        context: CaptureContext,
        options: CaptureOptions,
        label: str,
        stop_on_failure: bool,
    ) -> PassResult:
        result = PassResult(context=context)
        displays: Optional[Dict[int, Display]] = None
        try:
            for target in targets:
                if not target.active:
                    continue

                if isinstance(target, Screen) and target.component > 0:
                    if displays is None:
                        displays = self._provider.displays()
                    if target.component not in displays:
                        self._logger.debug("Display %s for %s is not connected", target.component, target.name)
                        continue

                title = result.context.active_window_title
                if not title:
                    continue

                if not options.title_allowed(title) and not result.context.force_now:
                    self._logger.debug(
                        "Active window title %r does not contain %r; skipping the rest of this pass",
                        title,
                        options.title_filter_text,
                    )
                    result.stopped_early = True
                    return result

                # The force flag is spent on the first target that gets this far.
                result.context = replace(result.context, force_now=False)

                component, rect, mouse, screenshot_type = self._capture_request(target)
                result.attempted += 1
                image = self._provider.get_screen_images(component, rect, mouse, target.resolution_ratio)
                if image is None:
                    self._logger.debug("No image acquired for %s (component %s)", target.name, component)
                    continue

                path = self._build_path(target, component, title, options)
                saved = self._provider.save_screenshot(
                    image=image,
                    path=path,
                    image_format=target.format,
                    component=component,
                    screenshot_type=screenshot_type,
                    jpeg_quality=target.jpeg_quality,
                    view_id=target.view_id,
                    label=options.label if options.label_enabled else "",
                    window_title=title,
                    process_name=result.context.active_window_process_name,
                    screenshot_log=self._screenshot_log,
                )

                if saved:
                    result.captured += 1
                    self._logger.debug("Screenshot of %s saved to %s", target.name, path)
                else:
                    result.failed += 1
                    self._logger.warning("Failed to save screenshot of %s to %s", target.name, path)
                    if stop_on_failure:
                        result.stopped_early = True
                        break
        except Exception as exc:
            result.context = replace(result.context, application_error=True)
            log_exception(self._logger, label, exc)
        return result

    @staticmethod
    def _capture_request(target: Target) -> Tuple[int, Optional[Rect], bool, ScreenshotType]:
        if isinstance(target, Region):
            return REGION_COMPONENT, target.rect, target.mouse, ScreenshotType.REGION
        if target.component == 0:
            # The active window is always captured without the cursor.
            return 0, None, False, target.screenshot_type
        return target.component, None, target.mouse, target.screenshot_type

    def _build_path(self, target: Target, component: int, title: str, options: CaptureOptions) -> str:
        folder = correct_folder_path(self._macros.parse_folder(target.folder, options.tags))
        name = self._macros.parse_name(target.name, target.macro, component, target.format, title, options.tags)
        return folder + name
