import json

from scripts.generate_report import main


def test_cli_writes_report_file(tmp_path, monkeypatch, capsys):
    from apps.worker.steps.export_render import orchestrator
    from tests.fixtures.generate_fixture import FakeDocumentRenderer, FakeImageProvider

    dataset = tmp_path / "cases.json"
    dataset.write_text(json.dumps([{"CASE KEY": "TC-1", "HEADLINE": "h", "STEP ID": "1", "STEP": "go"}]))
    monkeypatch.setattr(orchestrator, "report_image_provider", FakeImageProvider)
    monkeypatch.setattr(orchestrator, "spreadsheet_image_provider", FakeImageProvider)
    monkeypatch.setattr(orchestrator, "ChromiumPdfRenderer", FakeDocumentRenderer)

    out_dir = tmp_path / "out"
    code = main(["--kind", "pdf", "--dataset", str(dataset), "--output", str(out_dir)])

    assert code == 0
    written = list(out_dir.glob("test-cases-with-images-*.pdf"))
    assert len(written) == 1
    assert written[0].read_bytes().startswith(b"%PDF-")
    assert str(written[0]) in capsys.readouterr().out


def test_cli_reports_missing_dataset(tmp_path):
    code = main(["--kind", "excel", "--dataset", str(tmp_path / "missing.json"), "--output", str(tmp_path)])
    assert code == 1


def test_cli_reports_undecodable_dataset(tmp_path):
    dataset = tmp_path / "latin.json"
    dataset.write_bytes(b'[{"CASE KEY": "\xff\xfe"}]')
    code = main(["--kind", "pdf", "--dataset", str(dataset), "--output", str(tmp_path)])
    assert code == 1
