"""
si_series - ScanImage multi-file TIFF series resolution.

This package uses lazy imports so that `import si_series` does not load
tifffile until a TIFF is actually opened.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("si_series")
except PackageNotFoundError:
    # fallback for uninstalled source trees
    __version__ = "0.0.0"


# Define what's available for lazy loading
__all__ = [
    # Session
    "SeriesSession",
    "FileGroupOption",
    "open_series",
    # Descriptor / companions
    "SeriesDescriptor",
    "SidecarLocator",
    "enumerate_companions",
    # Naming
    "FileNameParts",
    "split_filename",
    "validate_filename",
    # Metadata
    "AxisSizes",
    "SeriesMode",
    "MetadataStore",
    "parse_comment",
    "resolve_axes",
    "is_scanimage",
    # TIFF
    "TiffDecoder",
    "is_scanimage_tiff",
    # Config
    "SeriesConfig",
    "load_config",
]


def __getattr__(name):
    """Lazy import attributes to avoid loading tifffile at startup."""
    if name in ("SeriesSession", "FileGroupOption", "open_series"):
        from . import session
        return getattr(session, name)

    if name in ("SeriesDescriptor", "SidecarLocator", "enumerate_companions"):
        from . import companions
        return getattr(companions, name)

    if name in ("FileNameParts", "split_filename", "validate_filename"):
        from . import naming
        return getattr(naming, name)

    if name in (
        "AxisSizes",
        "SeriesMode",
        "MetadataStore",
        "parse_comment",
        "resolve_axes",
        "is_scanimage",
    ):
        from . import metadata
        return getattr(metadata, name)

    if name in ("TiffDecoder", "is_scanimage_tiff"):
        from . import tiff
        return getattr(tiff, name)

    if name in ("SeriesConfig", "load_config"):
        from . import config
        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
