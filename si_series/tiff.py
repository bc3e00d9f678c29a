"""
TIFF access for series resolution.

Only the first page's ImageDescription (the ScanImage comment block), the
page count and the plane size are read; pixel data is never decoded.
"""

from __future__ import annotations

from pathlib import Path

import tifffile

from si_series import log
from si_series.metadata.comment import is_scanimage

logger = log.get("tiff")


class TiffDecoder:
    """
    Lazy TIFF header reader using a `tifffile.TiffFile` handle.

    Parameters
    ----------
    path : str or Path
        TIFF file to open.

    Examples
    --------
    >>> with TiffDecoder("cycle_00001.tif") as dec:
    ...     comment = dec.get_comment()
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._tf = tifffile.TiffFile(self.path)
        self._page_count: int | None = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        if self._tf is not None:
            self._tf.close()
            self._tf = None

    @property
    def _first_page(self):
        if self._tf is None:
            raise ValueError(f"{self.path} is closed")
        return self._tf.pages[0]

    def get_comment(self) -> str | None:
        """First-page ImageDescription, or None when absent or empty."""
        description = self._first_page.description
        return description or None

    def get_page_count(self) -> int:
        if self._page_count is None:
            if self._tf is None:
                raise ValueError(f"{self.path} is closed")
            self._page_count = len(self._tf.pages)
        return self._page_count

    @property
    def width(self) -> int:
        return int(self._first_page.imagewidth)

    @property
    def height(self) -> int:
        return int(self._first_page.imagelength)


def read_comment(path: str | Path) -> str | None:
    """Return the ScanImage comment block of ``path`` (None if absent)."""
    with TiffDecoder(path) as dec:
        return dec.get_comment()


def is_scanimage_tiff(path: str | Path) -> bool:
    """
    Check whether ``path`` is a TIFF whose comment carries the ScanImage marker.

    Unreadable or non-TIFF files return False.
    """
    try:
        comment = read_comment(path)
    except (OSError, tifffile.TiffFileError) as e:
        logger.debug(f"{path} is not a readable TIFF: {e}")
        return False
    return is_scanimage(comment)
