from __future__ import annotations

from datetime import UTC, datetime

import pytest

from arvr_assets.catalog.models import (
    DUPLICATE_VERSION_MESSAGE,
    Asset,
    AssetCategory,
    UploadOutcome,
)
from arvr_assets.errors import ValidationFailure


def _payload(**overrides):
    data = {
        "_id": "65f0c0ffee",
        "name": "Chair.GLB",
        "category": "uploads/models",
        "version": 3,
        "owner": "user-1",
        "isPublic": False,
        "privateLink": "tok-123",
        "type": "model/gltf-binary",
        "uploadDate": "2024-03-01T12:30:00.000Z",
        "base64Data": "Z2xURg==",
    }
    data.update(overrides)
    return data


def test_from_payload_maps_service_fields() -> None:
    asset = Asset.from_payload(_payload())

    assert asset.id == "65f0c0ffee"
    assert asset.name == "Chair.GLB"
    assert asset.category == "uploads/models"
    assert asset.version == 3
    assert asset.owner == "user-1"
    assert asset.is_public is False
    assert asset.share_token == "tok-123"
    assert asset.mime_type == "model/gltf-binary"
    assert asset.uploaded_at == datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
    assert asset.has_payload


def test_format_token_is_lowercase_suffix() -> None:
    assert Asset.from_payload(_payload()).format_token == "glb"
    assert Asset.from_payload(_payload(name="archive.tar.GZ")).format_token == "gz"
    assert Asset.from_payload(_payload(name="README")).format_token == ""


def test_canonical_category_uses_last_segment() -> None:
    asset = Asset.from_payload(_payload(category="C:\\uploads\\textures"))

    assert asset.canonical_category == "textures"


def test_owner_document_is_reduced_to_its_id() -> None:
    asset = Asset.from_payload(_payload(owner={"_id": "user-9", "username": "sam"}))

    assert asset.owner == "user-9"


def test_missing_payload_and_loose_values() -> None:
    asset = Asset.from_payload(_payload(base64Data="", version="7", isPublic="true", uploadDate=None))

    assert not asset.has_payload
    assert asset.version == 7
    assert asset.is_public is True
    assert asset.uploaded_at is None


@pytest.mark.parametrize("missing", ["_id", "name"])
def test_records_without_identity_are_rejected(missing: str) -> None:
    data = _payload()
    del data[missing]

    with pytest.raises(ValidationFailure):
        Asset.from_payload(data)


def test_category_labels_and_descriptions() -> None:
    assert [category.value for category in AssetCategory] == ["models", "textures", "animations", "sounds"]
    assert AssetCategory.SOUNDS.label == "Sounds"
    assert "3D models" in AssetCategory.MODELS.description


def test_upload_outcome_detects_duplicate_message() -> None:
    outcome = UploadOutcome.from_response({"message": DUPLICATE_VERSION_MESSAGE})

    assert outcome.duplicate
    assert outcome.asset is None
    assert outcome.message == DUPLICATE_VERSION_MESSAGE


def test_upload_outcome_wraps_stored_asset() -> None:
    outcome = UploadOutcome.from_response({"message": "File uploaded", "asset": _payload()})

    assert not outcome.duplicate
    assert outcome.asset is not None and outcome.asset.id == "65f0c0ffee"


def test_upload_outcome_requires_asset_unless_duplicate() -> None:
    with pytest.raises(ValidationFailure):
        UploadOutcome.from_response({"message": "File already exists"})
