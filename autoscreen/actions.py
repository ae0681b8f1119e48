from __future__ import annotations

from enum import Enum


class TriggerActionType(Enum):
    """Actions a trigger may ask the application to perform.

    Values are the stable identifiers used wherever an action is written
    down. ``legacy_code`` keeps the old numeric codes, which are not in
    declaration order.
    """

    DISABLE_PREVIEW = "disable_preview"
    DISABLE_SCHEDULE = "disable_schedule"
    ENABLE_PREVIEW = "enable_preview"
    ENABLE_SCHEDULE = "enable_schedule"
    EXIT_APPLICATION = "exit_application"
    HIDE_INTERFACE = "hide_interface"
    PLAY_SLIDESHOW = "play_slideshow"
    RUN_EDITOR = "run_editor"
    SHOW_INTERFACE = "show_interface"
    START_SCREEN_CAPTURE = "start_screen_capture"
    STOP_SCREEN_CAPTURE = "stop_screen_capture"

    @property
    def legacy_code(self) -> int:
        return _LEGACY_CODES[self]

    @classmethod
    def from_legacy_code(cls, code: int) -> "TriggerActionType":
        for action, legacy in _LEGACY_CODES.items():
            if legacy == code:
                return action
        raise ValueError(f"Unknown trigger action code {code}")

    @classmethod
    def from_value(cls, value: str) -> "TriggerActionType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown trigger action '{value}'") from None


_LEGACY_CODES = {
    TriggerActionType.DISABLE_PREVIEW: 0,
    TriggerActionType.DISABLE_SCHEDULE: 1,
    # Code 2 used to enable debug mode.
    TriggerActionType.PLAY_SLIDESHOW: 2,
    TriggerActionType.ENABLE_PREVIEW: 3,
    TriggerActionType.ENABLE_SCHEDULE: 4,
    TriggerActionType.EXIT_APPLICATION: 5,
    TriggerActionType.HIDE_INTERFACE: 6,
    TriggerActionType.RUN_EDITOR: 7,
    TriggerActionType.SHOW_INTERFACE: 8,
    TriggerActionType.START_SCREEN_CAPTURE: 9,
    TriggerActionType.STOP_SCREEN_CAPTURE: 10,
}
