from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class RasterDecoder(Protocol):
    """
    Protocol for the TIFF decoder feeding a series session.

    Must implement:
    - get_comment     (method)
    - get_page_count  (method)
    - width           (property)
    - height          (property)
    - close           (method)
    """

    def get_comment(self) -> str | None: ...

    def get_page_count(self) -> int: ...

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def close(self) -> None: ...


@runtime_checkable
class FilesystemAccessor(Protocol):
    def list_directory(self, path: Path) -> set[str]: ...

    def exists(self, path: Path) -> bool: ...


@runtime_checkable
class MetadataSink(Protocol):
    def record(self, key: str, value: str) -> None: ...
