"""
Series session: resolves one open ScanImage dataset.

A session owns everything derived from the file it opened (comment
metadata, axis sizes, series descriptor, sidecar lookup cache) and
restores all of it to defaults on `close`, so the same object can be
reused for another file. Sessions are not thread-safe.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable

from si_series import log
from si_series._protocols import FilesystemAccessor, RasterDecoder
from si_series.companions import (
    SeriesDescriptor,
    SidecarLocator,
    enumerate_companions,
    single_file,
)
from si_series.config import SeriesConfig, load_config
from si_series.errors import NamingViolation, SuffixMismatch, UnsupportedFormatError
from si_series.fs import LocalFilesystem
from si_series.metadata import (
    AxisSizes,
    MetadataMap,
    MetadataStore,
    SeriesMode,
    is_scanimage,
    parse_comment,
    resolve_axes,
)
from si_series.naming import validate_filename
from si_series.tiff import TiffDecoder

logger = log.get("session")

FORMAT_NAME = "ScanImage"
FORMAT_SUFFIXES = ("tif", "tiff", "xml")
FORMAT_DOMAIN = "Light Microscopy"
DATASET_DESCRIPTION = (
    "One or multiple .tif files corresponding to a Z-stack, "
    "and possibly one .xml metadata file"
)


class FileGroupOption(str, Enum):
    MUST_GROUP = "must_group"
    CAN_GROUP = "can_group"


class SeriesSession:
    """
    Resolve the file set and axes of a ScanImage TIFF dataset.

    Parameters
    ----------
    config : SeriesConfig, optional
        Defaults to `load_config()`.
    fs : FilesystemAccessor, optional
        Defaults to `LocalFilesystem`.
    decoder_factory : callable, optional
        ``decoder_factory(path) -> RasterDecoder``; defaults to `TiffDecoder`.
    store : MetadataStore, optional
        Receives comment pairs and pixel dimensions. A fresh store is
        created when omitted.

    Examples
    --------
    >>> with SeriesSession() as session:
    ...     descriptor = session.open("data/cycle_00001.tif")
    ...     files = session.used_files()
    """

    def __init__(
        self,
        config: SeriesConfig | None = None,
        fs: FilesystemAccessor | None = None,
        decoder_factory: Callable[[Path], RasterDecoder] | None = None,
        store: MetadataStore | None = None,
    ):
        self.config = config or load_config()
        self.fs = fs or LocalFilesystem()
        self.decoder_factory = decoder_factory or TiffDecoder
        self.store = store if store is not None else MetadataStore()
        self._locator = SidecarLocator(self.fs)
        self._reset_state()

    def _reset_state(self) -> None:
        self._current: Path | None = None
        self._metadata: MetadataMap = {}
        self._axes = AxisSizes()
        self._descriptor: SeriesDescriptor | None = None
        self._page_count = 0
        self._size_x = 0
        self._size_y = 0
        self._locator.clear()

    def _reset(self) -> None:
        self._reset_state()
        self.store.clear()

    # -- context manager --

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # -- state --

    @property
    def is_open(self) -> bool:
        return self._descriptor is not None

    @property
    def current_file(self) -> Path | None:
        return self._current

    @property
    def metadata(self) -> MetadataMap:
        return dict(self._metadata)

    @property
    def axes(self) -> AxisSizes:
        return self._axes

    @property
    def descriptor(self) -> SeriesDescriptor:
        self._assert_open()
        return self._descriptor

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def size_x(self) -> int:
        return self._size_x

    @property
    def size_y(self) -> int:
        return self._size_y

    def _assert_open(self) -> None:
        if self._descriptor is None:
            raise RuntimeError("No dataset is open; call open() first")

    # -- lifecycle --

    def open(self, path: str | Path) -> SeriesDescriptor:
        """
        Open ``path`` and resolve the series it belongs to.

        Raises
        ------
        UnsupportedFormatError
            The first page's comment has no ScanImage marker.
        DirectoryUnreadable
            The directory containing ``path`` cannot be listed.
        """
        if self.is_open:
            self.close()

        path = Path(path).absolute()
        logger.debug(f"Opening {path}")
        try:
            self._open(path)
        except BaseException:
            self._reset()
            raise
        return self._descriptor

    def _open(self, path: Path) -> None:
        decoder = self.decoder_factory(path)
        try:
            comment = decoder.get_comment()
            if not is_scanimage(comment):
                raise UnsupportedFormatError(f"{path} is not a ScanImage TIFF")
            self._page_count = decoder.get_page_count()
            self._size_x = decoder.width
            self._size_y = decoder.height
        finally:
            decoder.close()

        self._current = path
        self._metadata = parse_comment(comment, sink=self.store)
        self._axes = resolve_axes(self._metadata, self._page_count)

        # the sidecar search lists the directory; failure here aborts the open
        sidecar = self._locator.find(path.parent, self.config.sidecar_suffixes)

        descriptor = self._resolve_descriptor(path)
        self._descriptor = descriptor.with_sidecar(sidecar)
        self.store.populate_pixels(self._axes, self._size_x, self._size_y)

        logger.info(
            f"{path.name}: {self._descriptor.mode.value} mode, "
            f"Z={self._axes.size_z} C={self._axes.size_c} T={self._axes.size_t}, "
            f"{len(self._descriptor.pixel_files)} pixel file(s)"
        )

    def _resolve_descriptor(self, path: Path) -> SeriesDescriptor:
        mode = self._axes.mode
        if mode is SeriesMode.SINGLE:
            return single_file(path)

        ext = path.suffix.lower().lstrip(".")
        if ext not in self.config.tiff_suffixes:
            logger.warning(
                f"{path.name}: extension {ext!r} is not a TIFF suffix; "
                f"falling back to single-file mode"
            )
            return single_file(path)

        try:
            parts = validate_filename(
                path,
                self._axes,
                self._metadata,
                include_acqs_per_loop=self.config.suffix_includes_acqs_per_loop,
            )
        except SuffixMismatch as e:
            logger.warning(
                f"{path.name}: expected suffix {e.expected}, found {e.actual}; "
                f"falling back to single-file mode"
            )
            return single_file(path)
        except NamingViolation as e:
            logger.warning(f"{e}; falling back to single-file mode")
            return single_file(path)

        fs = self.fs if self.config.check_companions_exist else None
        return enumerate_companions(
            mode,
            path,
            parts,
            self._axes,
            self._metadata,
            fs=fs,
            include_acqs_per_loop=self.config.suffix_includes_acqs_per_loop,
        )

    def close(self) -> None:
        """Forget the open dataset and restore all defaults."""
        if self._current is not None:
            logger.debug(f"Closing {self._current}")
        self._reset()

    # -- queries --

    def is_single_file(self) -> bool:
        """True when the dataset is exactly one file with no sidecar."""
        descriptor = self.descriptor
        return (
            descriptor.mode is SeriesMode.SINGLE
            and descriptor.sidecar_metadata_file is None
        )

    def file_group_option(self) -> FileGroupOption:
        """MUST_GROUP when the open file is part of a grouped series."""
        if self.descriptor.is_grouped:
            return FileGroupOption.MUST_GROUP
        return FileGroupOption.CAN_GROUP

    def used_files(self, no_pixels: bool = False) -> list[Path]:
        """
        Files making up the open dataset.

        The sidecar metadata file comes first when present, followed by
        the pixel files unless ``no_pixels`` is set.
        """
        descriptor = self.descriptor
        sidecar = self._locator.find(
            descriptor.primary_file.parent, self.config.sidecar_suffixes
        )
        files: list[Path] = []
        if sidecar is not None:
            files.append(sidecar)
        if not no_pixels:
            files.extend(descriptor.pixel_files)
        return files

    def summary(self) -> dict:
        """JSON-serializable summary of the open dataset."""
        descriptor = self.descriptor
        return {
            "format": FORMAT_NAME,
            "domain": FORMAT_DOMAIN,
            "format_suffixes": list(FORMAT_SUFFIXES),
            "description": DATASET_DESCRIPTION,
            **descriptor.to_dict(),
            "axes": self._axes.to_dict(),
            "page_count": self._page_count,
            "size_x": self._size_x,
            "size_y": self._size_y,
            "file_group_option": self.file_group_option().value,
            "used_files": [str(p) for p in self.used_files()],
        }


def open_series(path: str | Path, **kwargs) -> SeriesDescriptor:
    """
    Resolve the series containing ``path`` with a throwaway session.

    Keyword arguments are passed to `SeriesSession`.
    """
    with SeriesSession(**kwargs) as session:
        return session.open(path)
