import logging

import pytest

from lidar_viewer.utils.validators import (
    parse_lnglat,
    validate_epsg_code,
    validate_profile_inputs,
)


def test_valid_profile_inputs():
    assert validate_profile_inputs("7.6", "51.9", "7.61", "51.91", "5") == (True, None)


@pytest.mark.parametrize(
    "args, fragment",
    [
        (("x", "51.9", "7.61", "51.91", "5"), "Invalid input"),
        (("7.6", "51.9", "7.61", "51.91", "0"), "positive"),
        (("7.6", "51.9", "7.61", "51.91", "-2"), "positive"),
        (("190", "51.9", "7.61", "51.91", "5"), "out of range"),
        (("7.6", "nan", "7.61", "51.91", "5"), "finite"),
    ],
)
def test_invalid_profile_inputs(args, fragment):
    valid, message = validate_profile_inputs(*args)
    assert not valid
    assert fragment in message


def test_parse_lnglat():
    assert parse_lnglat(" 7.5, 51.25 ") == (7.5, 51.25)
    with pytest.raises(ValueError):
        parse_lnglat("7.5")
    with pytest.raises(ValueError):
        parse_lnglat("a,b")


def test_validate_epsg_code(caplog):
    assert validate_epsg_code("25832", "Source CRS") == 25832
    with caplog.at_level(logging.ERROR):
        assert validate_epsg_code("utm", "Source CRS") is None
        assert validate_epsg_code("-1", "Source CRS") is None
        assert validate_epsg_code("1", "Source CRS") is None
    assert "Source CRS" in caplog.text
