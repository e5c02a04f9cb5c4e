"""Tests for the build_metadata_index command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

import scripts.build_metadata_index as cli
from domain.raster.errors import InvalidRasterError
from infrastructure.raster.metadata_store import JsonMetadataStore


class FakeReader:
    def __init__(self, tile_factory, failing=()):
        self.tile_factory = tile_factory
        self.failing = set(failing)

    def read_metadata(self, file_path, file_format=None, data_dir=None):
        path = Path(file_path)
        if path.name in self.failing:
            raise InvalidRasterError("Corrupted or invalid raster")
        return self.tile_factory(path.relative_to(data_dir).as_posix())


@pytest.fixture
def data_dir(tmp_path):
    root = tmp_path / "data"
    root.mkdir()
    for name in ("N45E005.hgt", "N45E006.hgt"):
        (root / name).write_bytes(b"x")
    return root


def test_cli_writes_manifest_next_to_data(
    data_dir, tile_factory, monkeypatch, capsys
):
    """TC-001: Default metadata directory is <data_dir>/manifest."""
    monkeypatch.setattr(
        cli, "RasterioMetadataAdapter", lambda: FakeReader(tile_factory)
    )

    assert cli.main([str(data_dir)]) == 0

    store = JsonMetadataStore(data_dir / "manifest")
    assert [m.filename for m in store.load_all()] == ["N45E005.hgt", "N45E006.hgt"]
    assert "generated: 2" in capsys.readouterr().out


def test_cli_failure_exit_code(data_dir, tmp_path, tile_factory, monkeypatch, capsys):
    """TC-002: Any failed raster makes the run fail."""
    monkeypatch.setattr(
        cli,
        "RasterioMetadataAdapter",
        lambda: FakeReader(tile_factory, failing={"N45E006.hgt"}),
    )

    code = cli.main([str(data_dir), "--metadata-dir", str(tmp_path / "out")])

    assert code == 1
    assert "N45E006.hgt" in capsys.readouterr().out


def test_cli_force_deletes_existing_records(data_dir, tile_factory, monkeypatch):
    """TC-003: --force wipes stale records first."""
    monkeypatch.setattr(
        cli, "RasterioMetadataAdapter", lambda: FakeReader(tile_factory)
    )
    store = JsonMetadataStore(data_dir / "manifest")
    store.save(tile_factory("N10E010.hgt", lon=10.0, lat=10.0))

    assert cli.main([str(data_dir), "--force"]) == 0

    assert not store.exists("N10E010.hgt")
    assert store.exists("N45E005.hgt")


def test_cli_missing_data_dir(tmp_path, capsys):
    """TC-004: Nonexistent data directory."""
    assert cli.main([str(tmp_path / "absent")]) == 1
    assert "not found" in capsys.readouterr().out
