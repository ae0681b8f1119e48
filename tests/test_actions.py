import pytest

from autoscreen.actions import TriggerActionType


def test_vocabulary_is_closed_and_identifiers_are_stable():
    assert {action.value for action in TriggerActionType} == {
        "disable_preview",
        "disable_schedule",
        "enable_preview",
        "enable_schedule",
        "exit_application",
        "hide_interface",
        "play_slideshow",
        "run_editor",
        "show_interface",
        "start_screen_capture",
        "stop_screen_capture",
    }


def test_legacy_codes_keep_historical_numbering():
    assert TriggerActionType.DISABLE_PREVIEW.legacy_code == 0
    assert TriggerActionType.PLAY_SLIDESHOW.legacy_code == 2
    assert TriggerActionType.ENABLE_PREVIEW.legacy_code == 3
    assert TriggerActionType.STOP_SCREEN_CAPTURE.legacy_code == 10
    assert sorted(action.legacy_code for action in TriggerActionType) == list(range(11))


def test_lookup_by_legacy_code_and_value():
    assert TriggerActionType.from_legacy_code(2) is TriggerActionType.PLAY_SLIDESHOW
    assert TriggerActionType.from_value(" Start_Screen_Capture ") is TriggerActionType.START_SCREEN_CAPTURE

    with pytest.raises(ValueError):
        TriggerActionType.from_legacy_code(11)
    with pytest.raises(ValueError):
        TriggerActionType.from_value("enable_debug_mode")
