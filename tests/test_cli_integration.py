"""Integration-style tests that exercise the CLI pipeline entrypoint."""
import csv
from pathlib import Path

import pytest
from openpyxl import load_workbook

import announcements.processing.pipeline as pipeline
from announcements.processing.scorer import LLMScorer


@pytest.fixture(autouse=True)
def _fake_llm(monkeypatch: pytest.MonkeyPatch, fake_scorer) -> None:
    """Route the CLI's default scorer to the in-memory fake."""

    monkeypatch.setattr(pipeline, "LLMScorer", lambda: fake_scorer)


def test_cli_writes_csv_output(tmp_path: Path, sample_file: Path, expected_record_count: int, run_cli, capsys) -> None:
    csv_output = tmp_path / "records.csv"

    run_cli(["--input", str(sample_file), "--output", str(csv_output)])

    with csv_output.open(encoding="utf-8", newline="") as fh:
        rows = list(csv.DictReader(fh))

    assert len(rows) == expected_record_count
    assert rows[0]["text_clean"] == (
        "Informamos que haverá interrupção no fornecimento de energia no sábado. Pedimos desculpas pelo transtorno."
    )
    assert {row["status"] for row in rows} == {"Scored"}
    assert f"Wrote {csv_output}" in capsys.readouterr().out


def test_cli_applies_filters_and_batch_size(tmp_path: Path, sample_file: Path, run_cli, fake_scorer) -> None:
    csv_output = tmp_path / "north.csv"

    run_cli(
        [
            "--input",
            str(sample_file),
            "--output",
            str(csv_output),
            "--community",
            "NORTH",
            "--author",
            "ana",
            "--batch-size",
            "2",
            "--delay-ms",
            "0",
        ]
    )

    rows = list(csv.DictReader(csv_output.read_text(encoding="utf-8").splitlines()))
    assert [row["title"] for row in rows] == ["Manutenção programada da rede elétrica", "Piscina interditada"]
    assert [len(call) for call in fake_scorer.calls] == [2, 2, 1]


def test_cli_writes_excel_output(tmp_path: Path, sample_file: Path, expected_record_count: int, run_cli) -> None:
    csv_output = tmp_path / "records.csv"
    excel_output = tmp_path / "records.xlsx"

    run_cli(
        [
            "--input",
            str(sample_file),
            "--output",
            str(csv_output),
            "--sink",
            "excel",
            "--excel-output",
            str(excel_output),
        ]
    )

    sheet = load_workbook(excel_output).active
    assert sheet.title == "scored_announcements"
    assert sheet.max_row - 1 == expected_record_count


def test_cli_exits_on_invalid_input(tmp_path: Path, run_cli, caplog) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("definitely not json", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["--input", str(broken), "--output", str(tmp_path / "out.csv")])

    assert excinfo.value.code == 1
    assert "not valid JSON" in caplog.text
    assert not (tmp_path / "out.csv").exists()


def test_cli_requires_input(run_cli) -> None:
    with pytest.raises(SystemExit):
        run_cli([])


def test_cli_exits_on_invalid_scorer_setting(
    tmp_path: Path, sample_file: Path, run_cli, caplog, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(pipeline, "LLMScorer", LLMScorer)
    monkeypatch.setenv("SCORING_TIMEOUT", "soon")

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["--input", str(sample_file), "--output", str(tmp_path / "out.csv")])

    assert excinfo.value.code == 1
    assert "SCORING_TIMEOUT" in caplog.text
    assert not (tmp_path / "out.csv").exists()
