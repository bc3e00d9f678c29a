"""
Parse the ``key=value`` comment block embedded in ScanImage TIFFs.
"""
from __future__ import annotations

import re

from si_series._protocols import MetadataSink
from si_series.metadata.base import SCANIMAGE_MARKER, MetadataMap

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def is_scanimage(comment: str | None) -> bool:
    """
    Check whether a comment block was written by ScanImage.

    Examples
    --------
    >>> is_scanimage("ABCscanimageXYZ")
    True
    >>> is_scanimage("ScanImage")
    False
    >>> is_scanimage(None)
    False
    """
    if comment is None:
        return False
    return SCANIMAGE_MARKER in comment


def parse_comment(
    comment: str | None, sink: MetadataSink | None = None
) -> MetadataMap:
    """
    Turn a comment block into an ordered key -> value mapping.

    Each line is split on its first ``=``; key and value are stripped of
    surrounding whitespace. Lines without ``=`` (free-form headers) and
    lines with an empty key are skipped. A repeated key keeps its first
    position and takes the last value.

    Parameters
    ----------
    comment : str or None
        Raw comment text. None gives an empty mapping.
    sink : MetadataSink, optional
        Receives every accepted pair via ``sink.record(key, value)``.

    Returns
    -------
    dict[str, str]

    Examples
    --------
    >>> parse_comment("scanimage\\nSI.hStackManager.numSlices = 5")
    {'SI.hStackManager.numSlices': '5'}
    """
    metadata: MetadataMap = {}
    if comment is None:
        return metadata

    for line in _LINE_BREAK.split(comment):
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        value = value.strip()
        metadata[key] = value
        if sink is not None:
            sink.record(key, value)
    return metadata
