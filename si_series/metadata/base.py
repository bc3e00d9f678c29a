"""
base types and data structures for series resolution.

this module contains the core types used across the metadata system:
- MetadataMap: ordered key/value pairs parsed from a comment block
- AxisSizes: resolved Z/C/T extents
- SeriesMode: single-file or grouped
- ScanImageKey: known comment key with its aliases
- SCANIMAGE_KEYS: central registry of the keys the resolver reads
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

MetadataMap = Dict[str, str]


class SeriesMode(str, Enum):
    SINGLE = "single"
    GROUPED = "grouped"


@dataclass(frozen=True)
class AxisSizes:
    """
    Z/C/T extents of one acquisition.

    Channels live inside each file's own pages, so `plane_count` only
    spans the Z and T axes.

    Examples
    --------
    >>> AxisSizes(size_z=5, size_c=3, size_t=2).plane_count
    10
    >>> AxisSizes().mode
    <SeriesMode.SINGLE: 'single'>
    """

    size_z: int = 1
    size_c: int = 1
    size_t: int = 1

    def __post_init__(self):
        for name in ("size_z", "size_c", "size_t"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

    @property
    def plane_count(self) -> int:
        return self.size_z * self.size_t

    @property
    def mode(self) -> SeriesMode:
        return SeriesMode.GROUPED if self.plane_count > 1 else SeriesMode.SINGLE

    def to_dict(self) -> dict:
        return {
            "size_z": self.size_z,
            "size_c": self.size_c,
            "size_t": self.size_t,
            "plane_count": self.plane_count,
        }


@dataclass(frozen=True)
class ScanImageKey:
    """
    A comment key read by the resolver.

    Attributes
    ----------
    canonical : str
        Short name used in code (e.g. "num_slices").
    names : tuple[str, ...]
        Dotted comment keys, in priority order. The first present wins.
    kind : str
        "int" for a plain integer, "count" for an integer or a delimited list
        whose length is the value.
    description : str
        Human-readable description.
    """

    canonical: str
    names: tuple[str, ...] = field(default_factory=tuple)
    kind: str = "int"
    description: str = ""


def _with_short_names(*names: str) -> tuple[str, ...]:
    """newer ScanImage releases drop the leading 'scanimage.' namespace."""
    out = list(names)
    for name in names:
        if name.startswith("scanimage."):
            out.append(name[len("scanimage."):])
    return tuple(out)


SCANIMAGE_KEYS: dict[str, ScanImageKey] = {
    "num_slices": ScanImageKey(
        canonical="num_slices",
        names=_with_short_names("scanimage.SI.hStackManager.numSlices"),
        description="Number of z-slices per volume",
    ),
    "channels": ScanImageKey(
        canonical="channels",
        names=_with_short_names(
            "scanimage.SI.hChannels.channelsActive",
            "scanimage.SI.hChannels.channelDisplay",
        ),
        kind="count",
        description="Active channels, as a count or a ';'-separated list",
    ),
    "timepoints": ScanImageKey(
        canonical="timepoints",
        names=_with_short_names(
            "scanimage.SI.hCycleManager.cycleIdxTotal",
            "scanimage.SI.acqsPerLoop",
        ),
        description="Cycle iterations or acquisitions per loop",
    ),
    "cycle_index_done": ScanImageKey(
        canonical="cycle_index_done",
        names=_with_short_names("scanimage.SI.hCycleManager.cycleIterIdxDone"),
        description="Completed cycle iterations when this file was written",
    ),
    "acqs_per_loop": ScanImageKey(
        canonical="acqs_per_loop",
        names=_with_short_names("scanimage.SI.acqsPerLoop"),
        description="Acquisitions per loop",
    ),
    "acquisition_number": ScanImageKey(
        canonical="acquisition_number",
        names=("acquisitionNumbers",),
        description="Acquisition number of the first frame in this file",
    ),
}

SCANIMAGE_MARKER = "scanimage"
