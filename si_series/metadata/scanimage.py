"""
scanimage.py

Functions to derive acquisition axes and filename expectations from a
parsed ScanImage comment block.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from si_series import log
from si_series.metadata.base import (
    SCANIMAGE_KEYS,
    AxisSizes,
    MetadataMap,
    ScanImageKey,
)

logger = log.get("metadata")

_LIST_SPLIT = re.compile(r"[;,\s]+")


def parse_int_value(text: str) -> int | None:
    """
    Parse a base-10 integer, returning None if the text is not one.

    Examples
    --------
    >>> parse_int_value(" 7 ")
    7
    >>> parse_int_value("7.5") is None
    True
    """
    text = text.strip()
    try:
        return int(text, 10)
    except ValueError:
        return None


def parse_count_value(text: str) -> int | None:
    """
    Parse an integer or count the entries of a delimited list.

    ScanImage writes channel selections either as a plain count or as a
    MATLAB vector such as ``[1;2;3]`` or ``1;2;3``.

    Examples
    --------
    >>> parse_count_value("2")
    2
    >>> parse_count_value("1;2;3")
    3
    >>> parse_count_value("[1 2]")
    2
    >>> parse_count_value("[]") is None
    True
    """
    text = text.strip()
    bracketed = text.startswith("[") and text.endswith("]")
    if bracketed:
        text = text[1:-1].strip()
    if not bracketed and ";" not in text and "," not in text:
        return parse_int_value(text)
    tokens = [t for t in _LIST_SPLIT.split(text) if t]
    return len(tokens) or None


def _lookup(metadata: MetadataMap, key: ScanImageKey) -> tuple[str, str] | None:
    for name in key.names:
        if name in metadata:
            return name, metadata[name]
    return None


def get_key_value(metadata: MetadataMap, canonical: str) -> int | None:
    """
    Read a registered key as a positive-or-zero integer.

    Returns None when the key is absent or its value cannot be parsed.
    """
    key = SCANIMAGE_KEYS[canonical]
    found = _lookup(metadata, key)
    if found is None:
        return None
    name, raw = found
    parse = parse_count_value if key.kind == "count" else parse_int_value
    value = parse(raw)
    if value is None or value < 0:
        logger.debug(f"Unparsable value {raw!r} for {name}; treating as absent")
        return None
    return value


def _axis_value(metadata: MetadataMap, canonical: str) -> int:
    value = get_key_value(metadata, canonical)
    if value is None or value < 1:
        return 1
    return value


def get_num_zplanes(metadata: MetadataMap) -> int:
    """Number of z-slices per volume (``hStackManager.numSlices``)."""
    return _axis_value(metadata, "num_slices")


def get_num_channels(metadata: MetadataMap) -> int:
    """Number of active channels (``channelsActive`` or ``channelDisplay``)."""
    return _axis_value(metadata, "channels")


def get_num_timepoints(metadata: MetadataMap) -> int:
    """Number of timepoints (``cycleIdxTotal`` or ``acqsPerLoop``)."""
    return _axis_value(metadata, "timepoints")


def resolve_axes(metadata: MetadataMap, base_channels: int | None = None) -> AxisSizes:
    """
    Derive Z/C/T sizes from a parsed comment block.

    Parameters
    ----------
    metadata : dict[str, str]
        Output of `parse_comment`.
    base_channels : int, optional
        Page count reported by the decoder for the primary file. A value
        that disagrees with the channel count from metadata is logged;
        metadata wins.

    Returns
    -------
    AxisSizes
        Missing or unparsable keys leave the axis at 1.

    Examples
    --------
    >>> resolve_axes({}, 1)
    AxisSizes(size_z=1, size_c=1, size_t=1)
    """
    axes = AxisSizes(
        size_z=get_num_zplanes(metadata),
        size_c=get_num_channels(metadata),
        size_t=get_num_timepoints(metadata),
    )
    if base_channels and base_channels != axes.size_c:
        logger.warning(
            f"Channel count mismatch: decoder reports {base_channels} page(s), "
            f"metadata reports {axes.size_c} channel(s); using metadata"
        )
    return axes


@dataclass(frozen=True)
class SuffixExpectation:
    """
    Inputs of the filename suffix a file is expected to carry.

    ``value = cycle_index_done * slices_per_volume * loop_factor + acquisition_number``
    where ``loop_factor`` is 1 unless the acqsPerLoop variant is enabled.
    """

    cycle_index_done: int
    slices_per_volume: int
    acquisition_number: int
    loop_factor: int = 1

    @property
    def value(self) -> int:
        return (
            self.cycle_index_done * self.slices_per_volume * self.loop_factor
            + self.acquisition_number
        )


def get_suffix_expectation(
    metadata: MetadataMap, include_acqs_per_loop: bool = False
) -> SuffixExpectation | None:
    """
    Build the expected-suffix inputs, or None if any required key is missing.

    Parameters
    ----------
    metadata : dict[str, str]
        Parsed comment block.
    include_acqs_per_loop : bool
        Multiply by ``acqsPerLoop`` (unverified variant, default off).
    """
    cycle = get_key_value(metadata, "cycle_index_done")
    slices = get_key_value(metadata, "num_slices")
    acq = get_key_value(metadata, "acquisition_number")
    if cycle is None or slices is None or acq is None:
        return None

    loop_factor = 1
    if include_acqs_per_loop:
        loop_factor = _axis_value(metadata, "acqs_per_loop")
    return SuffixExpectation(
        cycle_index_done=cycle,
        slices_per_volume=slices,
        acquisition_number=acq,
        loop_factor=loop_factor,
    )


def get_series_start(
    metadata: MetadataMap, axes: AxisSizes, include_acqs_per_loop: bool = False
) -> int:
    """
    First filename suffix of the acquisition the current file belongs to.

    ``cycleIterIdxDone * numSlices * loop_factor + 1``, using the same
    ``loop_factor`` as `get_suffix_expectation`. The cycle index defaults
    to 0 and the slice count to ``axes.size_z``.
    """
    cycle = get_key_value(metadata, "cycle_index_done") or 0
    slices = get_key_value(metadata, "num_slices") or axes.size_z
    loop_factor = 1
    if include_acqs_per_loop:
        loop_factor = _axis_value(metadata, "acqs_per_loop")
    return cycle * slices * loop_factor + 1


def get_stack_info(metadata: MetadataMap, base_channels: int | None = None) -> dict:
    """
    Get comprehensive series information from metadata.

    Returns
    -------
    dict
        - size_z, size_c, size_t, plane_count
        - mode: "single" or "grouped"
        - expected_suffix: int or None
    """
    axes = resolve_axes(metadata, base_channels)
    expectation = get_suffix_expectation(metadata)
    info = axes.to_dict()
    info["mode"] = axes.mode.value
    info["expected_suffix"] = expectation.value if expectation else None
    return info
