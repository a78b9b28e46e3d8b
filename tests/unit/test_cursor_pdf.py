import fitz

from apps.worker.lib.grouping import group_records
from apps.worker.lib.image_policy import ImageAsset
from apps.worker.steps.export_render.common import truncate
from apps.worker.steps.export_render.cursor_pdf import (
    RenderCursor,
    break_page_if_needed,
    generate_cursor_pdf,
    layout_case_header,
    layout_cases,
    layout_step,
)
from tests.fixtures.generate_fixture import create_sample_jpeg, sample_records


class RecordingSurface:
    def __init__(self):
        self.pages = 1
        self.texts = []
        self.images = []

    def new_page(self):
        self.pages += 1

    def text(self, x, y, value, size, bold=False):
        self.texts.append((self.pages, x, y, value, size, bold))

    def image(self, handle, x, y, width, height):
        self.images.append((self.pages, x, y, width, height))


def test_truncate_is_exact():
    assert truncate("a" * 80, 80) == "a" * 80
    assert truncate("a" * 81, 80) == "a" * 80 + "..."
    assert truncate("", 80) == ""


def test_break_threshold_is_strictly_greater():
    surface = RecordingSurface()
    assert break_page_if_needed(surface, RenderCursor(y=250), 250).y == 250
    cursor = break_page_if_needed(surface, RenderCursor(y=250.5), 250)
    assert (cursor.y, cursor.page_index, surface.pages) == (20, 2, 2)


def test_case_header_positions():
    surface = RecordingSurface()
    header = {"HEADLINE": "Login works", "DESCRIPTION": "d" * 90, "PRIORITY": "High"}
    cursor = layout_case_header(surface, RenderCursor(), "TC-1", header)
    assert [(t[2], t[3], t[4]) for t in surface.texts] == [
        (20, "Test Case: TC-1", 16),
        (30, "Headline: Login works", 12),
        (38, "Description: " + "d" * 80 + "...", 12),
        (46, "Priority: High", 12),
    ]
    assert surface.texts[0][5] is True
    assert cursor.y == 59


def test_case_header_skips_empty_fields():
    surface = RecordingSurface()
    cursor = layout_case_header(surface, RenderCursor(), "TC-2", {"HEADLINE": "", "PRIORITY": None})
    assert [t[3] for t in surface.texts] == ["Test Case: TC-2"]
    assert cursor.y == 35


def test_step_with_image_positions():
    surface = RecordingSurface()
    step = {"STEP ID": "1", "STEP": "Click", "TEST DATA": "x", "EXPECTED RESULT": "ok"}
    cursor = layout_step(surface, RenderCursor(y=59), step, image=object())
    assert [(t[1], t[2], t[3]) for t in surface.texts] == [
        (20, 59, "Step 1:"),
        (25, 65, "Action: Click"),
        (25, 71, "Test Data: x"),
        (25, 77, "Expected Result: ok"),
    ]
    assert surface.images == [(1, 130, 68, 60, 45)]
    assert cursor.y == 138


def test_step_action_is_cut_after_100_characters():
    surface = RecordingSurface()
    layout_step(surface, RenderCursor(), {"STEP ID": "1", "STEP": "a" * 100}, image=None)
    layout_step(surface, RenderCursor(), {"STEP ID": "2", "STEP": "b" * 101}, image=None)
    actions = [t[3] for t in surface.texts if t[3].startswith("Action: ")]
    assert actions == ["Action: " + "a" * 100, "Action: " + "b" * 100 + "..."]


def test_step_without_image_advances_less():
    surface = RecordingSurface()
    cursor = layout_step(surface, RenderCursor(y=20), {"STEP ID": "2", "STEP": "Go"}, image=None)
    assert surface.images == []
    assert cursor.y == 20 + 6 + 6 + 10 + 5


def test_steps_break_onto_new_page_past_threshold():
    records = [{"CASE KEY": "TC-1", "HEADLINE": ""}] + [
        {"CASE KEY": "TC-1", "STEP ID": str(i), "STEP": f"step {i}"} for i in range(1, 5)
    ]
    surface = RecordingSurface()
    cursor = layout_cases(surface, group_records(records), image=object())
    step_headers = [t for t in surface.texts if t[3].startswith("Step ")]
    assert [(t[0], t[2]) for t in step_headers] == [(1, 35), (1, 102), (1, 169), (2, 20)]
    assert cursor.page_index == 2
    assert surface.pages == 2


def test_generated_pdf_contains_case_text():
    cases = group_records(sample_records())
    asset = ImageAsset(key="shared", data=create_sample_jpeg())
    data = generate_cursor_pdf(cases, asset)
    assert data.startswith(b"%PDF-")

    with fitz.open(stream=data, filetype="pdf") as doc:
        text = "".join(page.get_text() for page in doc)
        image_count = sum(len(page.get_images()) for page in doc)
    assert "Test Case: TC-1" in text
    assert "Headline: Login works" in text
    assert "Action: Click login" in text
    assert "Test Case: TC-3" in text
    assert "Orphan" not in text
    assert image_count >= 1


def test_undecodable_image_is_omitted():
    cases = group_records(sample_records())
    data = generate_cursor_pdf(cases, ImageAsset(key="broken", data=b"garbage"))
    assert data.startswith(b"%PDF-")


def test_empty_cases_still_produce_pdf():
    assert generate_cursor_pdf({}).startswith(b"%PDF-")
