from __future__ import annotations

import argparse
import signal
import time
from pathlib import Path

from autoscreen.capture import ScreenCapture
from autoscreen.config import get_settings
from autoscreen.controller import CaptureController
from autoscreen.engine import CaptureEngine, CaptureOptions
from autoscreen.logging_utils import init_logger
from autoscreen.macros import MacroParser
from autoscreen.storage import ScreenshotRepository
from autoscreen.store import RegionStore, ScreenStore
from autoscreen.utils import is_session_locked


def main() -> None:
    parser = argparse.ArgumentParser(description="autoscreen observer (scheduled screen capture)")
    parser.add_argument("--screens-file", default=None, help="Override SCREENS_FILE (e.g. D:/autoscreen/screens.xml)")
    parser.add_argument("--regions-file", default=None, help="Override REGIONS_FILE (e.g. D:/autoscreen/regions.xml)")
    parser.add_argument(
        "--title-filter",
        default=None,
        help="Only capture while the active window title contains this text",
    )
    parser.add_argument("--once", action="store_true", help="Capture every active target once and exit")
    args = parser.parse_args()

    settings = get_settings()
    logger = init_logger("observer", settings.logging.directory, settings.logging.level)

    provider = ScreenCapture(logger)
    screen_store = ScreenStore(
        Path(args.screens_file).resolve() if args.screens_file else settings.files.screens_file,
        logger,
        display_count=provider.display_count,
        screenshots_folder=str(settings.capture.screenshots_folder),
        default_macro=settings.capture.default_macro,
        default_format=settings.capture.default_format,
    )
    region_store = RegionStore(
        Path(args.regions_file).resolve() if args.regions_file else settings.files.regions_file,
        logger,
    )
    repository = ScreenshotRepository(settings.files.screenshots_db)
    engine = CaptureEngine(provider, MacroParser(), repository, logger)

    options = CaptureOptions(
        title_filter_enabled=settings.filter.title_filter_enabled or args.title_filter is not None,
        title_filter_text=args.title_filter if args.title_filter is not None else settings.filter.title_filter_text,
        label_enabled=settings.label.enabled,
        label=settings.label.text,
        tags=settings.tags,
    )
    controller = CaptureController(engine, screen_store, region_store, provider, logger, options=options)
    if not controller.load():
        logger.warning("Some targets could not be loaded; continuing with what was read")

    if args.once:
        controller.capture_now()
        if controller.screenshots_taken:
            for record in repository.recent(limit=controller.screenshots_taken):
                logger.info("Saved %s", record.image_path)
        logger.info(
            "Capture finished: taken=%s failed=%s",
            controller.screenshots_taken,
            controller.screenshots_failed,
        )
        return

    def _graceful_stop(signum, frame):
        controller.stop_capture()
        controller.exit_requested = True
        logger.info("Received signal %s - shutting down observer", signum)

    signal.signal(signal.SIGINT, _graceful_stop)
    signal.signal(signal.SIGTERM, _graceful_stop)

    if settings.capture.start_on_launch:
        controller.start_capture()

    interval = settings.capture.interval_seconds
    logger.info(
        "Observer started: interval=%ss screens=%s regions=%s logged_screenshots=%s",
        interval,
        len(controller.screens),
        len(controller.regions),
        repository.count(),
    )

    try:
        while not controller.exit_requested:
            if is_session_locked():
                logger.debug("Skipping tick: session is locked")
            else:
                try:
                    controller.tick()
                except Exception as exc:
                    logger.exception("Tick failed: %s", exc)
            if controller.application_error:
                logger.warning(
                    "Application error flagged (taken=%s failed=%s)",
                    controller.screenshots_taken,
                    controller.screenshots_failed,
                )
                controller.clear_application_error()
            time.sleep(interval)
    finally:
        logger.info("Observer stopped")


if __name__ == "__main__":
    main()
