"""
Companion files of a ScanImage series.

- SeriesDescriptor: the resolved file set of one open dataset
- enumerate_companions: synthesize the sibling pixel files of a grouped series
- SidecarLocator: find the optional sidecar metadata file next to the data
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from si_series import log
from si_series._protocols import FilesystemAccessor
from si_series.metadata.base import AxisSizes, MetadataMap, SeriesMode
from si_series.metadata.scanimage import get_series_start
from si_series.naming import FileNameParts

logger = log.get("companions")


@dataclass(frozen=True)
class SeriesDescriptor:
    """
    Resolved file set of one ScanImage dataset.

    Attributes
    ----------
    mode : SeriesMode
        GROUPED when the files must be opened together, SINGLE otherwise.
    primary_file : Path
        The file that was opened.
    companion_files : tuple[Path, ...]
        Ordered pixel files of the grouped series (the primary file
        included). Empty in SINGLE mode.
    sidecar_metadata_file : Path or None
        Optional metadata file found next to the data; never a pixel file.
    """

    mode: SeriesMode
    primary_file: Path
    companion_files: tuple[Path, ...] = ()
    sidecar_metadata_file: Path | None = None

    @property
    def is_grouped(self) -> bool:
        return self.mode is SeriesMode.GROUPED

    @property
    def pixel_files(self) -> tuple[Path, ...]:
        if self.is_grouped and self.companion_files:
            return self.companion_files
        return (self.primary_file,)

    def with_sidecar(self, sidecar: Path | None) -> "SeriesDescriptor":
        return SeriesDescriptor(
            mode=self.mode,
            primary_file=self.primary_file,
            companion_files=self.companion_files,
            sidecar_metadata_file=sidecar,
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "primary_file": str(self.primary_file),
            "companion_files": [str(p) for p in self.companion_files],
            "sidecar_metadata_file": (
                None if self.sidecar_metadata_file is None
                else str(self.sidecar_metadata_file)
            ),
        }


def single_file(primary_file: Path) -> SeriesDescriptor:
    return SeriesDescriptor(mode=SeriesMode.SINGLE, primary_file=Path(primary_file))


def enumerate_companions(
    mode: SeriesMode,
    primary_file: str | Path,
    parts: FileNameParts | None,
    axes: AxisSizes,
    metadata: MetadataMap,
    fs: FilesystemAccessor | None = None,
    extension: str | None = None,
    include_acqs_per_loop: bool = False,
) -> SeriesDescriptor:
    """
    Build the descriptor of a series from its validated primary filename.

    Parameters
    ----------
    mode : SeriesMode
        Mode decided from the axis sizes.
    primary_file : str or Path
        File being opened.
    parts : FileNameParts or None
        Split primary filename; None when validation failed.
    axes : AxisSizes
        Resolved axes; ``size_z * size_t`` sibling names are generated.
    metadata : dict[str, str]
        Parsed comment block, read for the first suffix of the series.
    fs : FilesystemAccessor, optional
        When given, each synthesized name is checked with ``fs.exists`` and
        missing files are dropped with a warning.
    extension : str, optional
        Extension of the synthesized names; defaults to the primary's, or
        ``tif`` when it has none.
    include_acqs_per_loop : bool
        Scale the first suffix by ``acqsPerLoop``, matching the filename check.

    Returns
    -------
    SeriesDescriptor
        SINGLE when the primary's suffix lies outside the generated range
        or when none of the generated files exist.
    """
    primary_file = Path(primary_file)
    if mode is not SeriesMode.GROUPED or parts is None:
        return single_file(primary_file)

    ext = extension or parts.extension or "tif"
    naming = FileNameParts(
        prefix=parts.prefix,
        suffix=parts.suffix,
        extension=ext,
        suffix_width=parts.suffix_width,
    )
    directory = primary_file.parent
    start = get_series_start(metadata, axes, include_acqs_per_loop)
    count = axes.size_z * axes.size_t
    stop = start + count

    if not start <= parts.suffix < stop:
        logger.warning(
            f"{primary_file.name}: suffix {parts.suffix} is outside the series "
            f"range {start}..{stop - 1}; falling back to single-file mode"
        )
        return single_file(primary_file)

    files: list[Path] = []
    missing = 0
    for suffix in range(start, stop):
        candidate = directory / naming.format(suffix)
        if fs is not None and not _exists(fs, candidate):
            missing += 1
            continue
        files.append(candidate)

    if not files:
        logger.warning(
            f"None of the {count} companion file(s) of {primary_file.name} exist; "
            f"falling back to single-file mode"
        )
        return single_file(primary_file)
    if missing:
        logger.warning(
            f"{missing} of {count} companion file(s) missing for {primary_file.name}; "
            f"opening with {len(files)} file(s)"
        )
    logger.debug(f"Series {naming.prefix}: suffixes {start}..{stop - 1}")
    return SeriesDescriptor(
        mode=SeriesMode.GROUPED,
        primary_file=primary_file,
        companion_files=tuple(files),
    )


def _exists(fs: FilesystemAccessor, path: Path) -> bool:
    try:
        found = fs.exists(path)
    except OSError as e:
        logger.warning(f"Could not check companion file {path}: {e}")
        return False
    if not found:
        logger.warning(f"Missing companion file: {path}")
    return found


def _matches_suffix(name: str, suffixes: Iterable[str]) -> bool:
    ext = Path(name).suffix.lower().lstrip(".")
    return bool(ext) and ext in suffixes


@dataclass
class SidecarLocator:
    """
    Finds the first file in a directory with one of the given extensions.

    Results are cached per (directory, suffixes) until `clear` is called,
    so repeated used-file queries return the same answer without listing
    the directory again.
    """

    fs: FilesystemAccessor
    _cache: dict[tuple[Path, tuple[str, ...]], Path | None] = field(
        default_factory=dict, init=False, repr=False
    )

    def find(self, directory: str | Path, suffixes: Iterable[str]) -> Path | None:
        directory = Path(directory)
        key = (directory, tuple(sorted(s.lower().lstrip(".") for s in suffixes)))
        if key in self._cache:
            return self._cache[key]

        found = None
        for name in sorted(self.fs.list_directory(directory)):
            if _matches_suffix(name, key[1]):
                found = directory / name
                break
        if found is None:
            logger.debug(f"No sidecar with suffix {key[1]} in {directory}")
        self._cache[key] = found
        return found

    def clear(self) -> None:
        self._cache.clear()
