"""
ScanImage filename convention.

Pixel files of a grouped acquisition are named::

    <prefix>_<suffix>.<tif|tiff>

where ``<suffix>`` is a non-negative base-10 integer with no leading
``+``/sign, e.g. ``cycle_00003.tif``.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from si_series.errors import NoSeparator, NonIntegerSuffix, SuffixMismatch
from si_series.metadata.base import AxisSizes, MetadataMap
from si_series.metadata.scanimage import get_suffix_expectation


@dataclass(frozen=True)
class FileNameParts:
    """
    A filename split into prefix, integer suffix and extension.

    ``suffix_width`` is the length of a zero-padded suffix text, so ``00003``
    keeps its padding when sibling names are built. Unpadded suffixes such
    as ``10`` have width 1.
    """

    prefix: str
    suffix: int
    extension: str
    suffix_width: int = 1

    def format(self, suffix: int) -> str:
        """Build the sibling filename carrying ``suffix``."""
        name = f"{self.prefix}_{suffix:0{self.suffix_width}d}"
        return f"{name}.{self.extension}" if self.extension else name


def split_filename(path: str | Path) -> FileNameParts:
    """
    Split a path's base name on its last ``_`` and last ``.``.

    Raises
    ------
    NoSeparator
        The base name has no ``_``.
    NonIntegerSuffix
        The text between the last ``_`` and the last ``.`` is not a
        non-negative base-10 integer.

    Examples
    --------
    >>> split_filename("/data/cycle_00003.tif")
    FileNameParts(prefix='cycle', suffix=3, extension='tif', suffix_width=5)
    """
    name = Path(path).name
    sep = name.rfind("_")
    if sep < 0:
        raise NoSeparator(name)

    prefix, rest = name[:sep], name[sep + 1:]
    dot = rest.rfind(".")
    if dot < 0:
        suffix_text, extension = rest, ""
    else:
        suffix_text, extension = rest[:dot], rest[dot + 1:]

    if not (suffix_text.isascii() and suffix_text.isdigit()):
        raise NonIntegerSuffix(name, suffix_text)
    return FileNameParts(
        prefix=prefix,
        suffix=int(suffix_text),
        extension=extension,
        suffix_width=len(suffix_text) if suffix_text.startswith("0") else 1,
    )


def validate_filename(
    path: str | Path,
    axes: AxisSizes,
    metadata: MetadataMap,
    include_acqs_per_loop: bool = False,
) -> FileNameParts:
    """
    Split ``path`` and check its suffix against the comment metadata.

    The expected suffix is ``cycleIterIdxDone * numSlices + acquisitionNumbers``
    (times ``acqsPerLoop`` when ``include_acqs_per_loop`` is set). When any of
    those keys is missing the check cannot run and the name is accepted.

    Parameters
    ----------
    path : str or Path
        File being opened.
    axes : AxisSizes
        Resolved axes. A single-plane acquisition has nothing to group, so
        only the name format is checked.
    metadata : dict[str, str]
        Parsed comment block.
    include_acqs_per_loop : bool
        Use the unverified acqsPerLoop variant of the formula.

    Raises
    ------
    NoSeparator, NonIntegerSuffix, SuffixMismatch
    """
    parts = split_filename(path)
    if axes.plane_count <= 1:
        return parts

    expectation = get_suffix_expectation(metadata, include_acqs_per_loop)
    if expectation is not None and parts.suffix != expectation.value:
        raise SuffixMismatch(Path(path).name, parts.suffix, expectation.value)
    return parts
