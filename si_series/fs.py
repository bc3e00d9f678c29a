from __future__ import annotations

from pathlib import Path

from si_series import log
from si_series.errors import DirectoryUnreadable

logger = log.get("fs")


class LocalFilesystem:
    """Filesystem accessor backed by `pathlib`."""

    def list_directory(self, path: str | Path) -> set[str]:
        """
        Names of the regular files directly inside ``path``.

        Raises
        ------
        DirectoryUnreadable
            If the directory does not exist or cannot be read.
        """
        path = Path(path)
        try:
            names = {p.name for p in path.iterdir() if p.is_file()}
        except OSError as e:
            raise DirectoryUnreadable(f"Cannot list directory {path}: {e}") from e
        logger.debug(f"Listed {len(names)} file(s) in {path}")
        return names

    def exists(self, path: str | Path) -> bool:
        return Path(path).is_file()


def get_files(path: str | Path, suffixes: tuple[str, ...] = ("tif", "tiff")) -> list[Path]:
    """
    Sorted files in ``path`` whose extension is one of ``suffixes``.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Directory not found: {path}")
    wanted = {s.lower().lstrip(".") for s in suffixes}
    return sorted(
        p for p in path.iterdir()
        if p.is_file() and p.suffix.lower().lstrip(".") in wanted
    )
