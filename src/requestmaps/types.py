from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from requestmaps.config import BASEMAP_PROVIDER
from requestmaps.constants import LAYER_KINDS


@dataclass
class BoundingBox:
    minx: float
    miny: float
    maxx: float
    maxy: float

    @classmethod
    def from_bounds(cls, bounds):
        minx, miny, maxx, maxy = (float(v) for v in bounds)
        return cls(minx, miny, maxx, maxy)

    def padded(self, fraction):
        dx = (self.maxx - self.minx) * fraction
        dy = (self.maxy - self.miny) * fraction
        return BoundingBox(self.minx - dx, self.miny - dy, self.maxx + dx, self.maxy + dy)

    def as_extent(self):
        """(left, right, bottom, top), the order imshow and hexbin expect."""
        return (self.minx, self.maxx, self.miny, self.maxy)


@dataclass
class Layer:
    """One drawing layer of a composed figure."""
    data: Any
    kind: str = "polygons"
    style: dict = field(default_factory=dict)
    column: Optional[str] = None
    label: Optional[str] = None

    def __post_init__(self):
        if self.kind not in LAYER_KINDS:
            raise ValueError(f"Unknown layer kind '{self.kind}'. Expected one of {LAYER_KINDS}.")


@dataclass
class BasemapOptions:
    provider: str = BASEMAP_PROVIDER
    zoom: Any = "auto"
    alpha: float = 1.0
    required: bool = False


@dataclass
class DensityGrid:
    xx: np.ndarray
    yy: np.ndarray
    z: np.ndarray
    extent: BoundingBox
    normalized: bool = False


@dataclass
class BinGrid:
    counts: np.ndarray
    xedges: np.ndarray
    yedges: np.ndarray

    @property
    def extent(self):
        return BoundingBox(self.xedges[0], self.yedges[0], self.xedges[-1], self.yedges[-1])
