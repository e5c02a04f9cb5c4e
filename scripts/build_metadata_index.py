#!/usr/bin/env python3
"""Generate the tile metadata index of a DEM data directory.

Writes one JSON descriptor per raster so the directory can be indexed without
opening each file again. Descriptors already at the current schema version are
reused; outdated ones are regenerated from the rasters.

Usage:
    python scripts/build_metadata_index.py data/SRTM_GL3
    python scripts/build_metadata_index.py data/SRTM_GL3 --metadata-dir /tmp/manifest
    python scripts/build_metadata_index.py data/SRTM_GL3 --force --log-level DEBUG

Requirements:
    pip install -e .
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from domain.raster.versioning import FILEMETADATA_VERSION
from infrastructure.raster import (
    JsonMetadataStore,
    RasterioMetadataAdapter,
    build_metadata_index,
)

# Default metadata location, relative to the data directory
DEFAULT_METADATA_DIRNAME = "manifest"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("data_dir", type=Path, help="Root of the DEM dataset")
    ap.add_argument(
        "--metadata-dir",
        type=Path,
        default=None,
        help="Where descriptors are written "
        f"(default: <data_dir>/{DEFAULT_METADATA_DIRNAME})",
    )
    ap.add_argument(
        "--force",
        action="store_true",
        help="Delete and regenerate every descriptor",
    )
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.data_dir.is_dir():
        print(f"ERROR: data directory not found: {args.data_dir}")
        return 1

    metadata_dir = args.metadata_dir or args.data_dir / DEFAULT_METADATA_DIRNAME
    store = JsonMetadataStore(metadata_dir)
    if args.force:
        store.delete_all()

    report = build_metadata_index(
        args.data_dir, store, RasterioMetadataAdapter(), force=args.force
    )

    print(f"Metadata version {FILEMETADATA_VERSION} in {metadata_dir}")
    print(f"  generated: {len(report.generated)}")
    print(f"  reused:    {len(report.reused)}")
    print(f"  failed:    {len(report.failed)}")
    for name in report.failed:
        print(f"    {name}")
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
