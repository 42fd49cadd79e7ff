"""Tests for the strainscore CLI."""

import json

from click.testing import CliRunner

from strainscore.cli import main
from tests.conftest import TARGET, make_history, make_record, make_workout, write_history


def invoke(*args):
    return CliRunner().invoke(main, list(args))


class TestScore:
    def test_scores_last_day(self, tmp_path):
        records = make_history(7) + [make_record(TARGET, workouts=[make_workout(avg_hr=150.0)])]
        path = write_history(tmp_path / "history.json", records)
        result = invoke("score", str(path), "--max-hr", "190", "--resting-hr", "55")
        assert result.exit_code == 0, result.output
        out = json.loads(result.output)
        assert out["date"] == TARGET.isoformat()
        assert out["recovery"] is not None
        assert out["strain"] > 0
        assert out["workouts"][0]["strain"] > 0

    def test_implausible_workout_does_not_reject_file(self, tmp_path):
        bad = make_workout(minutes=-30, avg_hr=150.0)
        records = make_history(7) + [make_record(TARGET, workouts=[make_workout(avg_hr=150.0), bad])]
        path = write_history(tmp_path / "history.json", records)
        result = invoke("score", str(path))
        assert result.exit_code == 0, result.output
        out = json.loads(result.output)
        assert out["workouts"][0]["strain"] > 0
        assert out["workouts"][1]["strain"] == 0.0
        assert out["strain"] == out["workouts"][0]["strain"]

    def test_unknown_date(self, tmp_path):
        path = write_history(tmp_path / "history.json", make_history(3))
        result = invoke("score", str(path), "--date", "2020-01-01")
        assert result.exit_code != 0
        assert "No record for 2020-01-01" in result.output

    def test_bad_date(self, tmp_path):
        path = write_history(tmp_path / "history.json", make_history(3))
        result = invoke("score", str(path), "--date", "yesterday")
        assert result.exit_code != 0

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text('{"date": "2024-03-15"}')
        result = invoke("score", str(path))
        assert result.exit_code != 0
        assert "Could not read" in result.output

    def test_empty_history(self, tmp_path):
        path = write_history(tmp_path / "history.json", [])
        result = invoke("score", str(path))
        assert result.exit_code != 0
        assert "History is empty" in result.output


class TestFeatures:
    def test_prints_vector(self, tmp_path):
        records = make_history(7) + [make_record(TARGET, hrv=None)]
        path = write_history(tmp_path / "history.json", records)
        result = invoke("features", str(path))
        assert result.exit_code == 0, result.output
        out = json.loads(result.output)
        assert out["date"] == TARGET.isoformat()
        assert out["hrv"] is None
        assert out["avg_hrv_7d"] == 50.0

    def test_missing_day(self, tmp_path):
        path = write_history(tmp_path / "history.json", make_history(3))
        result = invoke("features", str(path), "--date", TARGET.isoformat())
        assert result.exit_code != 0
        assert "no daily record" in result.output


class TestBaseline:
    def test_prints_summary(self, tmp_path):
        records = make_history(7, strain=12.0) + [make_record(TARGET)]
        path = write_history(tmp_path / "history.json", records)
        result = invoke("baseline", str(path))
        assert result.exit_code == 0, result.output
        assert "HRV:" in result.output
        assert "ACWR:       1.00 (optimal)" in result.output
        assert "Days:       7" in result.output

    def test_not_enough_data(self, tmp_path):
        path = write_history(tmp_path / "history.json", make_history(3) + [make_record(TARGET)])
        result = invoke("baseline", str(path))
        assert result.exit_code == 0
        assert "Baseline unavailable" in result.output

    def test_verbose_flag(self, tmp_path):
        path = write_history(tmp_path / "history.json", make_history(3) + [make_record(TARGET)])
        assert invoke("-v", "baseline", str(path)).exit_code == 0
