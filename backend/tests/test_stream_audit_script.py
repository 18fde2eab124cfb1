"""
Tests for stream_audit.py script.

Verifies stream dumps, the uniformity report and CLI handling.
"""
import argparse
import json
import sys
from pathlib import Path

import pytest

from rngbridge.config_hash import get_config_hash
from rngbridge.logic.rng import seed_words_from_text
from scripts.stream_audit import (
    MAX_SAMPLE_VALUES,
    chi_squared_critical,
    main,
    parse_seed_words,
    run_audit,
    uniformity_report,
)

REFERENCE_KEY = [0x123, 0x234, 0x345, 0x456]
REFERENCE_KEY_OUTPUT = [1067595299, 955945823, 477289528, 4107218783, 4228976476]


class TestParseSeedWords:
    def test_parses_hex_and_decimal(self) -> None:
        assert parse_seed_words("0x123, 564,0x345") == [0x123, 564, 0x345]

    def test_rejects_garbage(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_seed_words("0x123,abc")


class TestRunAudit:
    def test_u32_stream_matches_reference(self) -> None:
        result = run_audit(REFERENCE_KEY, "u32", draws=5)

        assert result["values"] == REFERENCE_KEY_OUTPUT
        assert result["config_hash"] == get_config_hash()
        assert result["seed_words"] == REFERENCE_KEY
        assert result["values_truncated"] is False
        assert "min" not in result

    def test_int31_stream_is_shifted_u32(self) -> None:
        result = run_audit(REFERENCE_KEY, "int31", draws=3)
        assert result["values"] == [v >> 1 for v in REFERENCE_KEY_OUTPUT[:3]]

    def test_large_runs_are_truncated(self) -> None:
        result = run_audit(REFERENCE_KEY, "float", draws=MAX_SAMPLE_VALUES + 5)

        assert len(result["values"]) == MAX_SAMPLE_VALUES
        assert result["values_truncated"] is True
        assert result["draws"] == MAX_SAMPLE_VALUES + 5

    def test_range_report_passes_for_uniform_stream(self) -> None:
        result = run_audit(REFERENCE_KEY, "range", draws=20000, min_value=0, max_value=10, report=True)

        assert result["min"] == 0
        assert result["max"] == 10
        uniformity = result["uniformity"]
        assert uniformity["buckets"] == 10
        assert uniformity["draws"] == 20000
        assert uniformity["min_observed"] == 0
        assert uniformity["max_observed"] == 9
        assert uniformity["passed"] is True


class TestUniformityReport:
    def test_perfectly_flat_counts_have_zero_chi_squared(self) -> None:
        report = uniformity_report([0, 1, 2, 3] * 25, 0, 4)
        assert report.chi_squared == 0.0
        assert report.passed is True

    def test_skewed_counts_fail(self) -> None:
        report = uniformity_report([0] * 900 + [1] * 100, 0, 2)
        assert report.passed is False

    def test_critical_value_close_to_table(self) -> None:
        # chi-squared 0.999 quantile for 9 degrees of freedom is 27.877
        assert chi_squared_critical(9) == pytest.approx(27.877, abs=0.5)


class TestMain:
    def test_writes_json_to_out(self, monkeypatch, tmp_path: Path) -> None:
        out_path = tmp_path / "audit" / "stream.json"
        monkeypatch.setattr(
            sys,
            "argv",
            ["stream_audit.py", "--seed", "0x123,0x234,0x345,0x456", "--draws", "5", "--out", str(out_path)],
        )

        assert main() == 0

        data = json.loads(out_path.read_text())
        assert data["kind"] == "u32"
        assert data["values"] == REFERENCE_KEY_OUTPUT

    def test_seed_text_uses_hashed_words(self, monkeypatch, capsys) -> None:
        monkeypatch.setattr(
            sys, "argv", ["stream_audit.py", "--seed-text", "MATCH_42", "--draws", "2"]
        )

        assert main() == 0

        data = json.loads(capsys.readouterr().out)
        assert data["seed_words"] == seed_words_from_text("MATCH_42")

    def test_empty_range_is_parser_error(self, monkeypatch) -> None:
        monkeypatch.setattr(
            sys,
            "argv",
            ["stream_audit.py", "--seed", "1", "--kind", "range", "--min", "5", "--max", "5"],
        )

        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_seed_and_seed_text_are_exclusive(self, monkeypatch) -> None:
        monkeypatch.setattr(
            sys, "argv", ["stream_audit.py", "--seed", "1", "--seed-text", "MATCH_42"]
        )

        with pytest.raises(SystemExit):
            main()
