"""
in-memory metadata store populated by a series session.

holds two kinds of data:
- global metadata: every key/value pair found in the comment block, in order
- pixels: the resolved dimensions of the series
"""
from __future__ import annotations

from dataclasses import dataclass, field

from si_series.metadata.base import AxisSizes

DIMENSION_ORDER = "XYCZT"


@dataclass
class PixelsMetadata:
    size_x: int = 0
    size_y: int = 0
    size_z: int = 1
    size_c: int = 1
    size_t: int = 1
    image_count: int = 1
    dimension_order: str = DIMENSION_ORDER

    @classmethod
    def from_axes(cls, axes: AxisSizes, size_x: int, size_y: int) -> "PixelsMetadata":
        return cls(
            size_x=size_x,
            size_y=size_y,
            size_z=axes.size_z,
            size_c=axes.size_c,
            size_t=axes.size_t,
            image_count=axes.plane_count,
        )


@dataclass
class MetadataStore:
    """
    Collects provenance metadata for display.

    The core never reads values back from the store.

    Examples
    --------
    >>> store = MetadataStore()
    >>> store.record("scanimage.SI.acqsPerLoop", "2")
    >>> store.global_metadata
    {'scanimage.SI.acqsPerLoop': '2'}
    """

    global_metadata: dict[str, str] = field(default_factory=dict)
    pixels: PixelsMetadata | None = None

    def record(self, key: str, value: str) -> None:
        self.global_metadata[key] = value

    def populate_pixels(self, axes: AxisSizes, size_x: int, size_y: int) -> None:
        self.pixels = PixelsMetadata.from_axes(axes, size_x, size_y)

    def clear(self) -> None:
        self.global_metadata.clear()
        self.pixels = None

    def to_dict(self) -> dict:
        return {
            "global": dict(self.global_metadata),
            "pixels": None if self.pixels is None else vars(self.pixels).copy(),
        }
