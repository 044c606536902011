import pytest
import numpy as np
import pandas as pd

from requestmaps.processing.density import bin_counts, density_contours, density_levels, kernel_density
from requestmaps.types import BinGrid, BoundingBox, DensityGrid


@pytest.fixture
def clustered_coords():
    # Two clusters: a tight one around (2000, 2000) and a loose one around (7000, 7000)
    rng = np.random.default_rng(42)
    a = rng.normal(2000, 200, size=(150, 2))
    b = rng.normal(7000, 800, size=(50, 2))
    arr = np.vstack([a, b])
    return pd.DataFrame({'x': arr[:, 0], 'y': arr[:, 1]})


def test_kernel_density_grid(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=50)

    assert isinstance(grid, DensityGrid)
    assert grid.z.shape == (50, 50)
    assert grid.xx.shape == grid.z.shape
    assert (grid.z >= 0).all()
    assert not grid.normalized
    # Default extent covers the data
    assert grid.extent.minx < clustered_coords['x'].min()
    assert grid.extent.maxy > clustered_coords['y'].max()


def test_kernel_density_peak_in_tight_cluster(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=60)
    i, j = np.unravel_index(np.argmax(grid.z), grid.z.shape)
    assert abs(grid.xx[i, j] - 2000) < 600
    assert abs(grid.yy[i, j] - 2000) < 600


def test_kernel_density_normalized(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=40, normalize=True)

    assert grid.normalized
    assert np.isclose(grid.z.max(), 1.0)
    assert grid.z.min() >= 0


def test_kernel_density_explicit_extent(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=20, extent=(0, 0, 10000, 10000))
    assert grid.extent == BoundingBox(0, 0, 10000, 10000)
    assert np.isclose(grid.xx.min(), 0) and np.isclose(grid.xx.max(), 10000)


def test_kernel_density_accepts_array(clustered_coords):
    grid = kernel_density(clustered_coords.to_numpy(), gridsize=10, bw_method=0.3)
    assert grid.z.shape == (10, 10)


def test_kernel_density_needs_two_points():
    with pytest.raises(ValueError):
        kernel_density(pd.DataFrame({'x': [1.0], 'y': [1.0]}))


def test_bin_counts(clustered_coords):
    grid = bin_counts(clustered_coords, bins=10, extent=(-5000, -5000, 15000, 15000))

    assert isinstance(grid, BinGrid)
    assert grid.counts.shape == (10, 10)
    assert grid.counts.sum() == len(clustered_coords)
    assert grid.extent == BoundingBox(-5000, -5000, 15000, 15000)


def test_density_levels(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=30, normalize=True)
    levels = density_levels(grid, [0.9, 0.5, 0.99])

    assert len(levels) == 3
    assert list(levels) == sorted(levels)


def test_density_contours(clustered_coords, proj_crs):
    grid = kernel_density(clustered_coords, gridsize=80, normalize=True)
    contours = density_contours(grid, levels=[0.1, 0.3, 0.5, 0.7, 0.9, 1.0], crs=proj_crs)

    assert contours.crs == proj_crs
    assert len(contours) > 0
    assert set(contours.geom_type) <= {"Polygon", "MultiPolygon"}
    assert (contours['level_min'] < contours['level_max']).all()
    assert contours['level_min'].is_monotonic_increasing
    # Higher bands are smaller than the band below
    areas = contours.area.values
    assert areas[-1] < areas[0]


def test_density_contours_min_level(clustered_coords):
    grid = kernel_density(clustered_coords, gridsize=50, normalize=True)
    contours = density_contours(grid, levels=5, min_level=0.3)
    assert (contours['level_max'] > 0.3).all()


def test_kernel_density_identical_points():
    coords = pd.DataFrame({'x': [5.0, 5.0, 5.0], 'y': [7.0, 7.0, 7.0]})
    with pytest.raises(ValueError, match="two dimensions"):
        kernel_density(coords)


def test_kernel_density_collinear_points():
    coords = pd.DataFrame({'x': [0.0, 1.0, 2.0, 3.0], 'y': [0.0, 1.0, 2.0, 3.0]})
    with pytest.raises(ValueError, match="two dimensions"):
        kernel_density(coords, gridsize=10)
