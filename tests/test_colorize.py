import numpy as np
import pytest

from conftest import cloud_from_meters
from lidar_viewer.core.colorize import (
    CLASSIFICATION_COLORS,
    colorize_points,
    colorize_with_settings,
    get_available_schemes,
)
from lidar_viewer.core.colormaps import sample_colormap
from lidar_viewer.core.models import ViewSettings


def _points(n, z=None):
    z = np.arange(n, dtype=np.float64) if z is None else np.asarray(z, dtype=np.float64)
    return np.column_stack((np.arange(n), np.zeros(n), z))


def test_elevation_spans_the_colormap():
    data = cloud_from_meters(_points(3, z=[10.0, 15.0, 20.0]))
    rgba = colorize_points(data, "elevation", "viridis").reshape(-1, 4)

    assert rgba.shape == (3, 4)
    assert tuple(rgba[0, :3]) == sample_colormap("viridis", 0.0)
    assert tuple(rgba[1, :3]) == sample_colormap("viridis", 0.5)
    assert tuple(rgba[2, :3]) == sample_colormap("viridis", 1.0)
    assert (rgba[:, 3] == 255).all()


def test_flat_elevation_does_not_divide_by_zero():
    data = cloud_from_meters(_points(4, z=[7.0] * 4))
    rgba = colorize_points(data, "elevation", "plasma").reshape(-1, 4)
    assert (rgba[:, :3] == sample_colormap("plasma", 0.0)).all()


def test_intensity_without_buffer_is_uniform_gray():
    data = cloud_from_meters(_points(5))
    rgba = colorize_points(data, "intensity", "viridis")
    assert rgba.shape == (20,)
    assert (rgba.reshape(-1, 4) == (180, 180, 180, 255)).all()


def test_intensity_uses_observed_range():
    data = cloud_from_meters(_points(3), intensities=[0.0, 0.25, 0.5])
    rgba = colorize_points(data, "intensity", "gray").reshape(-1, 4)
    assert tuple(rgba[0]) == (0, 0, 0, 255)
    assert tuple(rgba[1]) == (128, 128, 128, 255)
    assert tuple(rgba[2]) == (255, 255, 255, 255)


def test_classification_palette_and_unknown_codes():
    data = cloud_from_meters(_points(3), classifications=[2, 6, 42])
    rgba = colorize_points(data, "classification", "viridis").reshape(-1, 4)
    assert tuple(rgba[0, :3]) == CLASSIFICATION_COLORS[2]
    assert tuple(rgba[1, :3]) == CLASSIFICATION_COLORS[6]
    assert tuple(rgba[2, :3]) == (180, 180, 180)
    assert (rgba[:, 3] == 255).all()


def test_hidden_classes_are_transparent():
    codes = [2, 6, 2, 5, 6, 9]
    data = cloud_from_meters(_points(6), classifications=codes)
    visibility = {2: False, 6: True, 3: False}
    rgba = colorize_points(data, "classification", "viridis", visibility).reshape(-1, 4)

    for code, alpha in zip(codes, rgba[:, 3]):
        assert alpha == (0 if code == 2 else 255)


def test_classification_without_buffer_is_uniform_gray():
    data = cloud_from_meters(_points(2))
    rgba = colorize_points(data, "classification", "viridis", {2: False}).reshape(-1, 4)
    assert (rgba == (180, 180, 180, 255)).all()


def test_rgb_copies_colors_with_opaque_alpha():
    colors = [[10, 20, 30, 0], [40, 50, 60, 128]]
    data = cloud_from_meters(_points(2), colors=colors)
    rgba = colorize_points(data, "rgb", "viridis").reshape(-1, 4)
    np.testing.assert_array_equal(rgba, [[10, 20, 30, 255], [40, 50, 60, 255]])
    # source buffer untouched
    assert data.colors[3] == 0


def test_rgb_without_colors_falls_back_to_elevation():
    data = cloud_from_meters(_points(4))
    np.testing.assert_array_equal(
        colorize_points(data, "rgb", "turbo"),
        colorize_points(data, "elevation", "turbo"),
    )


def test_unknown_scheme_raises():
    data = cloud_from_meters(_points(2))
    with pytest.raises(ValueError):
        colorize_points(data, "height", "viridis")


def test_colorize_with_settings():
    data = cloud_from_meters(_points(2), classifications=[3, 4])
    settings = ViewSettings(
        color_scheme="classification",
        colormap="viridis",
        classification_visibility={4: False},
    )
    rgba = colorize_with_settings(data, settings).reshape(-1, 4)
    assert tuple(rgba[:, 3]) == (255, 0)


def test_available_schemes():
    assert get_available_schemes(None) == {
        "elevation": True,
        "intensity": False,
        "classification": False,
        "rgb": False,
    }
    data = cloud_from_meters(_points(2), intensities=[0.1, 0.2], colors=[[1, 2, 3, 255]] * 2)
    assert get_available_schemes(data) == {
        "elevation": True,
        "intensity": True,
        "classification": False,
        "rgb": True,
    }


def test_default_settings_color_by_elevation():
    data = cloud_from_meters(_points(3))
    np.testing.assert_array_equal(
        colorize_with_settings(data), colorize_points(data, "elevation", "viridis")
    )


def test_elevation_colors_match_the_scalar_sampler_on_rounding_halves():
    data = cloud_from_meters(_points(3, z=[0.0, 7.5, 100.0]))
    rgba = colorize_points(data, "elevation", "viridis").reshape(-1, 4)
    assert tuple(int(c) for c in rgba[1, :3]) == sample_colormap("viridis", 7.5 / 100.0)
