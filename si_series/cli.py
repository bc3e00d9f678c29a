"""
CLI entry point for si_series.

Resolves a ScanImage TIFF and reports its series layout.
"""
import json
import sys

import click


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the resolved series as JSON.",
)
@click.option(
    "--no-pixels",
    is_flag=True,
    help="Only list non-pixel (sidecar) files among the used files.",
)
@click.option(
    "--acqs-per-loop-suffix/--no-acqs-per-loop-suffix",
    default=None,
    help="Include acqsPerLoop in the expected filename suffix (unverified). "
         "Defaults to the configured value.",
)
@click.option(
    "--sniff",
    is_flag=True,
    help="Only report whether PATH is a ScanImage TIFF.",
)
def main(path, as_json=False, no_pixels=False, acqs_per_loop_suffix=None, sniff=False):
    """
    Resolve the ScanImage series containing PATH.

    PATH may be a TIFF file or a directory; for a directory the first TIFF
    (by name) is opened.

    \b
    Files are grouped when named <prefix>_<suffix>.<tif|tiff>, where
    <suffix> is a non-negative base-10 integer with no sign.

    \b
    Examples:
      si-series data/cycle_00001.tif
      si-series data/cycle_00001.tif --json
      si-series data/cycle_00001.tif --sniff
      si-series data/
    """
    from pathlib import Path

    from si_series.config import load_config
    from si_series.fs import get_files
    from si_series.session import SeriesSession
    from si_series.tiff import is_scanimage_tiff

    config = load_config(suffix_includes_acqs_per_loop=acqs_per_loop_suffix)

    path = Path(path)
    if path.is_dir():
        files = get_files(path, config.tiff_suffixes)
        if not files:
            click.secho(f"No TIFF files found in {path}", fg="red", err=True)
            sys.exit(1)
        path = files[0]

    if sniff:
        found = is_scanimage_tiff(path)
        click.echo("scanimage" if found else "not scanimage")
        sys.exit(0 if found else 1)

    try:
        with SeriesSession(config=config) as session:
            session.open(path)
            summary = session.summary()
            used = session.used_files(no_pixels=no_pixels)
    except (OSError, ValueError) as e:
        click.secho(f"Failed to resolve {path}: {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        summary["used_files"] = [str(p) for p in used]
        click.echo(json.dumps(summary, indent=2))
        return

    axes = summary["axes"]
    click.echo(f"Format:      {summary['format']} ({summary['domain']})")
    click.echo(f"Mode:        {summary['mode']} ({summary['file_group_option']})")
    click.echo(
        f"Axes:        Z={axes['size_z']} C={axes['size_c']} T={axes['size_t']} "
        f"({axes['plane_count']} plane(s))"
    )
    click.echo(f"Plane size:  {summary['size_x']} x {summary['size_y']}")
    click.echo(f"Sidecar:     {summary['sidecar_metadata_file'] or '-'}")
    click.echo("Used files:")
    for p in used:
        click.echo(f"  {p}")


if __name__ == "__main__":
    main()
