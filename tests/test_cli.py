from pathlib import Path

import pytest

from lidar_viewer.cli import main
from lidar_viewer.core.projection import GeodeticProjection


def _lnglat(easting, northing):
    lng, lat = GeodeticProjection().forward(easting, northing)
    return f"{lng},{lat}"


def test_info(las_file: Path, capsys):
    assert main(["info", str(las_file)]) == 0
    out = capsys.readouterr().out
    assert "tile.las: 100 points" in out
    assert "schemes: elevation, intensity, classification, rgb" in out


def test_info_directory(las_file: Path, capsys):
    assert main(["info", str(las_file.parent)]) == 0
    assert "tile.las" in capsys.readouterr().out


def test_profile_outputs_sorted_csv(las_file: Path, capsys):
    code = main(
        [
            "profile",
            str(las_file),
            "--start",
            _lnglat(404490.0, 5758505.0),
            "--end",
            _lnglat(404610.0, 5758505.0),
            "--width",
            "30",
        ]
    )
    assert code == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "distance,elevation,classification,intensity,r,g,b"
    rows = [line.split(",") for line in lines[1:]]
    assert len(rows) == 100
    distances = [float(r[0]) for r in rows]
    assert distances == sorted(distances)
    assert rows[0][4:] == ["255", "128", "0"]


def test_profile_rejects_bad_width(las_file: Path):
    assert main(["profile", str(las_file), "--start", "7.6,51.9", "--end", "7.7,51.9", "--width", "-1"]) == 2


def test_colorize_hides_classes(las_file: Path, capsys):
    assert main(["colorize", str(las_file), "--scheme", "classification", "--hide", "2"]) == 0
    assert "hidden: 50" in capsys.readouterr().out


def test_invalid_epsg(las_file: Path):
    assert main(["--source-epsg", "utm", "info", str(las_file)]) == 2


def test_unknown_epsg(las_file: Path):
    assert main(["--source-epsg", "1", "info", str(las_file)]) == 2


@pytest.mark.parametrize("max_points", ["0", "-3", "many"])
def test_invalid_max_points(las_file: Path, max_points):
    with pytest.raises(SystemExit) as exc_info:
        main(["--max-points", max_points, "info", str(las_file)])
    assert exc_info.value.code == 2


def test_missing_file_exit_code(tmp_path: Path):
    assert main(["info", str(tmp_path / "missing.las")]) == 1


def test_resolve_path_accepts_dataset_ids(las_file: Path):
    from lidar_viewer import config
    from lidar_viewer.cli import resolve_path

    assert resolve_path(str(las_file)) == las_file
    assert resolve_path("muenster-east") == config.get_dataset("muenster-east").path
    assert resolve_path("unknown.las") == Path("unknown.las")
