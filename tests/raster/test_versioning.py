"""Tests for metadata schema versioning (hard break, no migration)."""

from __future__ import annotations

import pytest

from domain.raster.errors import (
    MetadataRegenerationRequiredError,
    OutdatedMetadataError,
    UnknownMetadataVersionError,
)
from domain.raster.versioning import (
    CURRENT_VERSION,
    FILEMETADATA_VERSION,
    MetadataVersion,
    check_metadata_version,
    is_current_version,
)


def test_current_version_constant():
    """TC-001: Current schema is 2.2 and is the newest known tag."""
    assert FILEMETADATA_VERSION == "2.2"
    assert CURRENT_VERSION is MetadataVersion.V2_2
    assert [v.value for v in MetadataVersion] == ["2.1", "2.2"]


def test_check_accepts_current_version():
    """TC-002: Current tag passes."""
    assert check_metadata_version("2.2") is MetadataVersion.V2_2
    assert is_current_version("2.2")


def test_check_rejects_outdated_version():
    """TC-003: Known older tag requires regeneration."""
    with pytest.raises(OutdatedMetadataError) as exc_info:
        check_metadata_version("2.1")

    assert exc_info.value.version == "2.1"
    assert isinstance(exc_info.value, MetadataRegenerationRequiredError)
    assert not is_current_version("2.1")


@pytest.mark.parametrize("version", ["1.0", "2.3", "", None, "2.2 "])
def test_check_rejects_unknown_version(version):
    """TC-004: Unknown, empty or missing tags are never coerced."""
    with pytest.raises(UnknownMetadataVersionError) as exc_info:
        check_metadata_version(version)

    assert exc_info.value.version == version
    assert isinstance(exc_info.value, MetadataRegenerationRequiredError)
