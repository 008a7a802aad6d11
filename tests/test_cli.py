import json

import pytest

from landmarkdrive import main as cli


@pytest.fixture
def config_path(tmp_path):
    data = {
        "title": "CLI drive",
        "origin": "Start",
        "destination": "End",
        "route": [[0.0, 0.0], [0.0, 0.01], [0.0, 0.02], [0.0, 0.3]],
        "landmarks": [
            {"name": "Bridge", "lon": 0.0, "lat": 0.02},
            {"name": "Outside", "lon": 50.0, "lat": 50.0},
        ],
        "region": [-1, -1, 1, 1],
    }
    path = tmp_path / "drive.json"
    path.write_text(json.dumps(data), encoding="utf8")
    return path


def test_headless_prints_notifications(config_path, capsys):
    assert cli.main([str(config_path), "--headless"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [
        "You have crossed the landmark: Bridge",
        "You have reached your destination!",
        "Completed 4 steps.",
    ]


def test_missing_route_reported(tmp_path, capsys):
    path = tmp_path / "drive.json"
    path.write_text(json.dumps({"directions_file": "missing.json"}), encoding="utf8")

    assert cli.main([str(path), "--headless"]) == 1
    assert "Unable to start the drive" in capsys.readouterr().out


def test_landmarks_file_merged(tmp_path, capsys):
    (tmp_path / "landmarks.csv").write_text("name,longitude,latitude\nTower,0.0,0.0\n", encoding="utf8")
    path = tmp_path / "drive.json"
    path.write_text(json.dumps({"route": [[0.0, 0.0]], "landmarks_file": "landmarks.csv"}), encoding="utf8")

    assert cli.main([str(path), "--headless"]) == 0
    assert "You have crossed the landmark: Tower" in capsys.readouterr().out


def test_duplicate_landmark_across_config_and_file(tmp_path, capsys):
    (tmp_path / "landmarks.csv").write_text("name,longitude,latitude\nTower,0.0,0.0\n", encoding="utf8")
    data = {
        "route": [[0.0, 0.0]],
        "landmarks": [{"name": "Tower", "lon": 1.0, "lat": 1.0}],
        "landmarks_file": "landmarks.csv",
    }
    path = tmp_path / "drive.json"
    path.write_text(json.dumps(data), encoding="utf8")

    assert cli.main([str(path), "--headless"]) == 1
    out = capsys.readouterr().out
    assert "Unable to start the drive" in out
    assert "Tower" in out
