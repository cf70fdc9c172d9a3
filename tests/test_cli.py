"""Tests for the flexr command line."""

import json

import pytest

from flexr_analytics.cli import format_seconds, main

EXPORT = {
    "sleep": [
        {"category": "asleepCore", "startTime": "2024-03-04T22:00:00", "endTime": "2024-03-05T06:00:00"},
        {"category": "asleepDeep", "startTime": "2024-03-04T23:00:00", "endTime": "2024-03-05T00:30:00"},
    ],
    "heartRate": [
        {"bpm": 150, "startTime": "2024-03-05T07:00:00", "endTime": "2024-03-05T07:10:00"},
    ],
    "workouts": [
        {
            "id": "watch-1",
            "startTime": "2024-03-05T07:00:00",
            "endTime": "2024-03-05T07:25:00",
            "totalDistanceMeters": 5000,
        },
        {
            "id": "phone-1",
            "startTime": "2024-03-05T07:00:03",
            "endTime": "2024-03-05T07:25:05",
            "totalDistanceMeters": 5006,
        },
    ],
    "segments": [
        {"stationName": "ski_erg", "segmentType": "station", "durationSeconds": 250, "timestamp": "2024-03-01T07:00:00"},
        {"stationName": "ski_erg", "segmentType": "station", "durationSeconds": 240, "timestamp": "2024-03-05T07:00:00"},
        {"stationName": "run_1", "segmentType": "run", "durationSeconds": 300, "timestamp": "2024-03-05T06:50:00"},
    ],
}


@pytest.fixture
def export_file(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps(EXPORT))
    return str(path)


class TestCommands:
    """Smoke tests for each sub-command."""

    def test_sleep(self, export_file, capsys):
        main(["sleep", export_file, "--date", "2024-03-06"])
        out = capsys.readouterr().out
        assert "2024-03-04" in out
        assert "8.0h" in out

    def test_zones(self, export_file, capsys):
        main(["zones", export_file, "--max-hr", "190"])
        assert "Tempo" in capsys.readouterr().out

    def test_pace(self, export_file, capsys):
        main(["pace", export_file])
        out = capsys.readouterr().out
        assert "watch-1" in out
        assert "5:00" in out

    def test_stations(self, export_file, capsys):
        main(["stations", export_file])
        out = capsys.readouterr().out
        assert "ski_erg" in out
        assert "improving" in out

    def test_load(self, export_file, capsys):
        main(["load", export_file, "--date", "2024-03-05", "--target", "8"])
        assert "of 8.0h target" in capsys.readouterr().out

    def test_readiness(self, export_file, capsys):
        main(["readiness", export_file, "--hrv", "65", "--resting-hr", "50", "--date", "2024-03-05"])
        assert "Readiness" in capsys.readouterr().out

    def test_ingest_skips_phone_copy(self, export_file, tmp_path, capsys):
        db = str(tmp_path / "flexr.db")
        main(["ingest", export_file, "--db", db, "--user", "athlete-1"])
        out = capsys.readouterr().out
        assert "Stored 1 workouts" in out
        assert "skipped 1" in out


class TestErrors:
    """Tests for error exits."""

    def test_missing_file_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["pace", str(tmp_path / "nope.json")])
        assert exc.value.code == 1
        assert "File not found" in capsys.readouterr().out

    def test_invalid_export_exits_1(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"workouts": [{"id": "x"}]}))
        with pytest.raises(SystemExit) as exc:
            main(["pace", str(path)])
        assert exc.value.code == 1

    @pytest.mark.parametrize("max_hr", ["-5", "0"])
    def test_invalid_max_hr_exits_1(self, export_file, max_hr, capsys):
        """A non-positive max HR is an error, never replaced by the default."""
        with pytest.raises(SystemExit) as exc:
            main(["zones", export_file, "--max-hr", max_hr])
        assert exc.value.code == 1
        assert "Max heart rate must be positive" in capsys.readouterr().out

    def test_unknown_timezone_exits_1(self, export_file, monkeypatch, capsys):
        monkeypatch.setenv("FLEXR_TIMEZONE", "Mars/Olympus_Mons")
        with pytest.raises(SystemExit) as exc:
            main(["sleep", export_file, "--date", "2024-03-06"])
        assert exc.value.code == 1
        assert "Unknown timezone" in capsys.readouterr().out

    def test_mixed_offsets_exit_1(self, tmp_path, capsys):
        path = tmp_path / "mixed.json"
        path.write_text(json.dumps({"sleep": [
            {"category": "asleepCore", "startTime": "2024-03-04T22:00:00Z", "endTime": "2024-03-05T06:00:00"},
        ]}))
        with pytest.raises(SystemExit) as exc:
            main(["sleep", str(path)])
        assert exc.value.code == 1


class TestFormatSeconds:
    """Tests for time formatting."""

    def test_minutes(self):
        assert format_seconds(245) == "4:05"

    def test_hours(self):
        assert format_seconds(4200) == "1:10:00"
