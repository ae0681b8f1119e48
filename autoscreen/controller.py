from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

from .actions import TriggerActionType
from .collection import RegionCollection, ScreenCollection, TargetCollection
from .engine import CaptureContext, CaptureEngine, CaptureOptions, CaptureProvider, PassResult
from .logging_utils import log_exception
from .models import Region, Screen
from .store import RegionStore, ScreenStore, TargetStore

TickResult = Tuple[PassResult, PassResult]


class CaptureController:
    """Owns the target collections and everything a tick needs.

    Every structural edit rewrites the matching store straight away. A
    failed rewrite or load raises the application error flag instead of
    raising. ``hooks`` are called after the controller has applied an
    action's own state change, for the parts that belong to a UI.
    """

    def __init__(
        self,
        engine: CaptureEngine,
        screen_store: ScreenStore,
        region_store: RegionStore,
        provider: CaptureProvider,
        logger: logging.Logger,
        options: CaptureOptions | None = None,
        hooks: Optional[Mapping[TriggerActionType, Callable[[], None]]] = None,
    ):
        self._engine = engine
        self._screen_store = screen_store
        self._region_store = region_store
        self._provider = provider
        self._logger = logger
        self._hooks: Dict[TriggerActionType, Callable[[], None]] = dict(hooks or {})

        self.screens = ScreenCollection()
        self.regions = RegionCollection()
        self.context = CaptureContext()
        self.options = options or CaptureOptions()

        self.running = False
        self.schedule_enabled = True
        self.interface_visible = True
        self.exit_requested = False
        self.screenshots_taken = 0
        self.screenshots_failed = 0

    @property
    def application_error(self) -> bool:
        return self.context.application_error

    def clear_application_error(self) -> None:
        self.context = replace(self.context, application_error=False)

    def load(self) -> bool:
        self.screens.clear()
        self.regions.clear()
        screens_loaded = self._screen_store.load(self.screens)
        regions_loaded = self._region_store.load(self.regions)
        if not (screens_loaded and regions_loaded):
            self._flag_error()
        self._logger.info("Loaded %s screens and %s regions", len(self.screens), len(self.regions))
        return screens_loaded and regions_loaded

    # Control surface

    def start_capture(self) -> None:
        if self.running:
            self._logger.info("Screen capture is already running")
            return
        self.running = True
        self._logger.info("Screen capture started")

    def stop_capture(self) -> None:
        if not self.running:
            return
        self.running = False
        self._logger.info("Screen capture stopped")

    def capture_now(self) -> Optional[TickResult]:
        self.context = replace(self.context, force_now=True)
        return self.tick()

    def set_title_filter(self, enabled: bool, text: str = "") -> None:
        self.options = replace(self.options, title_filter_enabled=enabled, title_filter_text=text)

    def set_label(self, enabled: bool, label: str = "") -> None:
        self.options = replace(self.options, label_enabled=enabled, label=label)

    def set_tags(self, tags: Mapping[str, str]) -> None:
        self.options = replace(self.options, tags=dict(tags))

    def show_interface(self) -> None:
        self.interface_visible = True

    def hide_interface(self) -> None:
        self.interface_visible = False

    def perform(self, action: TriggerActionType) -> None:
        self._logger.debug("Performing trigger action %s", action.value)
        handlers: Dict[TriggerActionType, Callable[[], None]] = {
            TriggerActionType.DISABLE_SCHEDULE: lambda: setattr(self, "schedule_enabled", False),
            TriggerActionType.ENABLE_SCHEDULE: lambda: setattr(self, "schedule_enabled", True),
            TriggerActionType.EXIT_APPLICATION: self._exit,
            TriggerActionType.HIDE_INTERFACE: self.hide_interface,
            TriggerActionType.SHOW_INTERFACE: self.show_interface,
            TriggerActionType.START_SCREEN_CAPTURE: self.start_capture,
            TriggerActionType.STOP_SCREEN_CAPTURE: self.stop_capture,
        }
        handler = handlers.get(action)
        if handler is not None:
            handler()
        hook = self._hooks.get(action)
        if hook is not None:
            hook()
        elif handler is None:
            self._logger.info("No handler registered for trigger action %s", action.value)

    def _exit(self) -> None:
        self.stop_capture()
        self.exit_requested = True

    # Per-tick entry point

    def tick(self) -> Optional[TickResult]:
        """Run the screen pass and then the region pass.

        Does nothing unless capture is running with the schedule enabled
        or a forced capture is pending. Callers must not start a tick while
        another is running.
        """
        if not self.context.force_now and not (self.running and self.schedule_enabled):
            return None

        try:
            title, process_name = self._provider.active_window()
        except Exception as exc:
            self._flag_error()
            log_exception(self._logger, "CaptureController::tick", exc)
            return None
        self.context = replace(self.context, active_window_title=title, active_window_process_name=process_name)

        screen_result = self._engine.run_screen_pass(self.screens, self.context, self.options)
        self._absorb(screen_result)
        region_result = self._engine.run_region_pass(self.regions, self.context, self.options)
        self._absorb(region_result)
        return screen_result, region_result

    def _absorb(self, result: PassResult) -> None:
        self.context = result.context
        self.screenshots_taken += result.captured
        self.screenshots_failed += result.failed

    # Structural edits

    def add_screen(self, screen: Screen) -> bool:
        if self.screens.get_by_component(screen.component) is not None:
            self._logger.warning("Another screen already captures component %s", screen.component)
        self.screens.add(screen)
        return self._persist(self._screen_store, self.screens)

    def change_screen(self, screen: Screen) -> bool:
        if not self.screens.replace(screen):
            return False
        return self._persist(self._screen_store, self.screens)

    def remove_screen(self, screen: Screen) -> bool:
        if not self.screens.remove(self.screens.get(screen)):
            return False
        return self._persist(self._screen_store, self.screens)

    def remove_screens(self, screens: Iterable[Screen]) -> bool:
        return self._remove_many(self._screen_store, self.screens, screens)

    def add_region(self, region: Region) -> bool:
        self.regions.add(region)
        return self._persist(self._region_store, self.regions)

    def change_region(self, region: Region) -> bool:
        if not self.regions.replace(region):
            return False
        return self._persist(self._region_store, self.regions)

    def remove_region(self, region: Region) -> bool:
        if not self.regions.remove(self.regions.get(region)):
            return False
        return self._persist(self._region_store, self.regions)

    def remove_regions(self, regions: Iterable[Region]) -> bool:
        return self._remove_many(self._region_store, self.regions, regions)

    def _remove_many(self, store: TargetStore, collection: TargetCollection, targets: Iterable) -> bool:
        count_before = len(collection)
        for target in targets:
            collection.remove(collection.get(target))
        if len(collection) < count_before:
            return self._persist(store, collection)
        return False

    def _persist(self, store: TargetStore, collection: TargetCollection) -> bool:
        if store.save(collection):
            return True
        self._flag_error()
        return False

    def _flag_error(self) -> None:
        self.context = replace(self.context, application_error=True)
