from pathlib import Path

import pytest

from conftest import FakeFilesystem
from si_series.companions import SeriesDescriptor, SidecarLocator, enumerate_companions
from si_series.errors import DirectoryUnreadable
from si_series.metadata import AxisSizes, SeriesMode
from si_series.naming import split_filename

DATA = Path("/data")


def names(descriptor):
    return [p.name for p in descriptor.companion_files]


def test_single_mode_has_no_companions():
    primary = DATA / "stack_1.tif"
    descriptor = enumerate_companions(
        SeriesMode.SINGLE, primary, split_filename(primary), AxisSizes(), {}
    )
    assert descriptor == SeriesDescriptor(SeriesMode.SINGLE, primary)
    assert descriptor.companion_files == ()
    assert descriptor.pixel_files == (primary,)


def test_failed_validation_collapses_to_single():
    primary = DATA / "image.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, None, AxisSizes(size_z=3), {}
    )
    assert descriptor.mode is SeriesMode.SINGLE
    assert descriptor.companion_files == ()


def test_grouped_synthesizes_consecutive_names():
    primary = DATA / "stack_2.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3, size_t=2), {}
    )
    assert descriptor.mode is SeriesMode.GROUPED
    assert names(descriptor) == [f"stack_{i}.tif" for i in range(1, 7)]
    assert all(p.parent == DATA for p in descriptor.companion_files)


def test_start_follows_cycle_index():
    metadata = {
        "scanimage.SI.hCycleManager.cycleIterIdxDone": "2",
        "scanimage.SI.hStackManager.numSlices": "3",
    }
    primary = DATA / "cycle_00007.tiff"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3), metadata
    )
    assert names(descriptor) == ["cycle_00007.tiff", "cycle_00008.tiff", "cycle_00009.tiff"]


def test_missing_extension_defaults_to_tif():
    primary = DATA / "stack_1"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=2), {}
    )
    assert names(descriptor) == ["stack_1.tif", "stack_2.tif"]


def test_missing_companions_are_omitted_with_warning(warnings_text):
    fs = FakeFilesystem({DATA: {"stack_1.tif", "stack_3.tif"}})
    primary = DATA / "stack_1.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3), {}, fs=fs
    )
    assert names(descriptor) == ["stack_1.tif", "stack_3.tif"]
    assert len(fs.exists_calls) == 3
    assert "stack_2.tif" in warnings_text()


def test_exists_error_omits_file(warnings_text):
    class FlakyFs(FakeFilesystem):
        def exists(self, path):
            if Path(path).name == "stack_2.tif":
                raise PermissionError("denied")
            return True

    primary = DATA / "stack_1.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3), {},
        fs=FlakyFs(),
    )
    assert names(descriptor) == ["stack_1.tif", "stack_3.tif"]
    assert "denied" in warnings_text()


def test_enumeration_is_deterministic():
    primary = DATA / "stack_1.tif"
    args = (SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=4), {})
    assert enumerate_companions(*args) == enumerate_companions(*args)


def test_sidecar_is_found_case_insensitively():
    fs = FakeFilesystem({DATA: {"stack_1.tif", "Metadata.XML"}})
    locator = SidecarLocator(fs)
    assert locator.find(DATA, ["xml"]) == DATA / "Metadata.XML"


def test_sidecar_missing_returns_none():
    fs = FakeFilesystem({DATA: {"stack_1.tif", "notes.txt", "xml"}})
    assert SidecarLocator(fs).find(DATA, {"xml"}) is None


def test_sidecar_first_match_is_stable():
    fs = FakeFilesystem({DATA: {"b.xml", "a.xml", "c.tif"}})
    assert SidecarLocator(fs).find(DATA, ["xml"]) == DATA / "a.xml"


def test_sidecar_lookup_is_memoized():
    fs = FakeFilesystem({DATA: {"a.xml"}})
    locator = SidecarLocator(fs)
    first = locator.find(DATA, ["xml"])
    fs.listing[DATA] = set()
    assert locator.find(DATA, [".XML"]) == first
    assert fs.list_calls == 1

    locator.clear()
    assert locator.find(DATA, ["xml"]) is None
    assert fs.list_calls == 2


def test_sidecar_listing_failure_propagates():
    locator = SidecarLocator(FakeFilesystem(fail_listing=True))
    with pytest.raises(DirectoryUnreadable):
        locator.find(DATA, ["xml"])


def test_descriptor_to_dict():
    descriptor = SeriesDescriptor(
        SeriesMode.GROUPED,
        DATA / "s_1.tif",
        (DATA / "s_1.tif", DATA / "s_2.tif"),
        DATA / "m.xml",
    )
    d = descriptor.to_dict()
    assert d["mode"] == "grouped"
    assert d["companion_files"] == [str(DATA / "s_1.tif"), str(DATA / "s_2.tif")]
    assert d["sidecar_metadata_file"] == str(DATA / "m.xml")


def test_primary_outside_range_collapses_to_single(warnings_text):
    primary = DATA / "stack_50.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3), {}
    )
    assert descriptor == SeriesDescriptor(SeriesMode.SINGLE, primary)
    assert "outside the series range" in warnings_text()


def test_start_uses_acqs_per_loop_only_when_enabled():
    metadata = {
        "scanimage.SI.hCycleManager.cycleIterIdxDone": "1",
        "scanimage.SI.hStackManager.numSlices": "5",
        "scanimage.SI.acqsPerLoop": "2",
    }
    axes = AxisSizes(size_z=5, size_t=2)
    primary = DATA / "stack_7.tif"
    parts = split_filename(primary)
    descriptor = enumerate_companions(SeriesMode.GROUPED, primary, parts, axes, metadata)
    assert names(descriptor) == [f"stack_{i}.tif" for i in range(6, 16)]
    assert primary in descriptor.companion_files

    primary = DATA / "stack_12.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), axes, metadata,
        include_acqs_per_loop=True,
    )
    assert names(descriptor) == [f"stack_{i}.tif" for i in range(11, 21)]


def test_all_companions_missing_collapses_to_single(warnings_text):
    fs = FakeFilesystem({DATA: set()})
    primary = DATA / "stack_1.tif"
    descriptor = enumerate_companions(
        SeriesMode.GROUPED, primary, split_filename(primary), AxisSizes(size_z=3), {}, fs=fs
    )
    assert descriptor.mode is SeriesMode.SINGLE
    assert descriptor.companion_files == ()
    assert len(fs.exists_calls) == 3
    assert "None of the 3 companion file(s)" in warnings_text()
