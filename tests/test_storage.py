import uuid
from datetime import datetime

from autoscreen.models import ImageFormat, ScreenshotRecord, ScreenshotType
from autoscreen.storage import ScreenshotRepository


def _record(view_id, name, label=""):
    return ScreenshotRecord(
        captured_at=datetime(2024, 5, 1, 9, 30, 15),
        image_path=f"/shots/{name}.jpeg",
        view_id=view_id,
        screenshot_type=ScreenshotType.SCREEN,
        component=1,
        format=ImageFormat.JPEG,
        window_title="Editor",
        process_name="editor.exe",
        label=label,
        hash_digest="abc",
    )


def test_repository_appends_and_reads_back(tmp_path):
    repo = ScreenshotRepository(tmp_path / "db" / "screenshots.db")
    first_view, second_view = uuid.uuid4(), uuid.uuid4()

    first = _record(first_view, "one")
    first_id = repo.add_screenshot(first)
    repo.add_screenshot(_record(first_view, "two", label="Sprint"))
    repo.add_screenshot(_record(second_view, "three"))

    assert first.id == first_id
    assert repo.count() == 3

    latest = repo.recent(limit=2)
    assert [str(r.image_path) for r in latest] == ["/shots/three.jpeg", "/shots/two.jpeg"]
    assert latest[1].label == "Sprint"
    assert latest[1].view_id == first_view
    assert latest[1].screenshot_type is ScreenshotType.SCREEN
    assert latest[1].format is ImageFormat.JPEG


def test_repository_survives_reopen(tmp_path):
    path = tmp_path / "screenshots.db"
    ScreenshotRepository(path).add_screenshot(_record(uuid.uuid4(), "one"))
    assert ScreenshotRepository(path).count() == 1
