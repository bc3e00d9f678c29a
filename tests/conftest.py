"""
Shared pytest fixtures for si_series tests.

All tests run on synthetic data: ScanImage-style TIFFs are written with
tifffile into tmp_path, and the filesystem/decoder collaborators can be
replaced with the in-memory fakes below.

Usage:
    pytest tests/ -v                    # Run all tests
    SI_SERIES_DEBUG=1 pytest tests/     # Debug-level package logging
"""

import logging
from pathlib import Path

import numpy as np
import pytest
import tifffile

from si_series import log
from si_series.config import ENV_ACQS_PER_LOOP_SUFFIX
from si_series.errors import DirectoryUnreadable
import si_series.session  # noqa: F401  (creates all package loggers)


GROUPED_COMMENT = "\n".join(
    [
        "scanimage",
        "scanimage.SI.hStackManager.numSlices=3",
        "scanimage.SI.hChannels.channelsActive=1",
        "scanimage.SI.acqsPerLoop=1",
    ]
)

SINGLE_COMMENT = "\n".join(
    [
        "scanimage",
        "scanimage.SI.hStackManager.numSlices=1",
        "scanimage.SI.hChannels.channelsActive=1",
    ]
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record):
        self.records.append(record)


class FakeFilesystem:
    """In-memory filesystem accessor: {directory: {names}}."""

    def __init__(self, listing: dict | None = None, fail_listing: bool = False):
        self.listing = {Path(k): set(v) for k, v in (listing or {}).items()}
        self.fail_listing = fail_listing
        self.list_calls = 0
        self.exists_calls: list[Path] = []

    def list_directory(self, path):
        self.list_calls += 1
        if self.fail_listing:
            raise DirectoryUnreadable(f"Cannot list directory {path}")
        return set(self.listing.get(Path(path), set()))

    def exists(self, path):
        path = Path(path)
        self.exists_calls.append(path)
        return path.name in self.listing.get(path.parent, set())


class FakeDecoder:
    def __init__(self, comment, page_count=1, width=16, height=8):
        self.comment = comment
        self.page_count = page_count
        self.width = width
        self.height = height
        self.closed = False

    def get_comment(self):
        return self.comment

    def get_page_count(self):
        return self.page_count

    def close(self):
        self.closed = True


def make_decoder_factory(comment, page_count=1, width=16, height=8):
    decoders = []

    def factory(path):
        dec = FakeDecoder(comment, page_count=page_count, width=width, height=height)
        decoders.append(dec)
        return dec

    factory.decoders = decoders
    return factory


def write_scanimage_tiff(path, comment, pages=1, shape=(8, 16)):
    """Write a small uint16 TIFF whose first page carries ``comment``."""
    data = np.zeros((pages, *shape), dtype=np.uint16)
    tifffile.imwrite(
        path,
        data,
        description=comment,
        metadata=None,
        photometric="minisblack",
    )
    return Path(path)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Point the settings directory at a temp home and clear env overrides."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.delenv(ENV_ACQS_PER_LOOP_SUFFIX, raising=False)
    return home


@pytest.fixture
def log_records():
    """Records emitted by si_series loggers during the test."""
    handler = ListHandler()
    log.attach(handler)
    yield handler.records
    log.detach(handler)


@pytest.fixture
def warnings_text(log_records):
    def _text():
        return "\n".join(
            r.getMessage() for r in log_records if r.levelno >= logging.WARNING
        )

    return _text


@pytest.fixture
def write_tiff():
    return write_scanimage_tiff


@pytest.fixture
def grouped_dir(tmp_path):
    """Directory with a complete 3-plane series stack_1..stack_3.tif."""
    for i in (1, 2, 3):
        write_scanimage_tiff(tmp_path / f"stack_{i}.tif", GROUPED_COMMENT)
    return tmp_path
