from __future__ import annotations

import pytest

from arvr_assets.catalog.models import Asset
from arvr_assets.catalog.share_link import (
    DEFAULT_SHARE_ERROR,
    ShareLinkResolver,
    extract_share_token,
)
from arvr_assets.errors import NetworkFailure, NotFound, ValidationFailure


def _asset(asset_id: str, category: str = "uploads/models") -> Asset:
    return Asset(id=asset_id, name=f"{asset_id}.glb", category=category, payload="Z2xURg==")


class FakeClient:
    def __init__(self, assets: dict[str, Asset]) -> None:
        self.assets = assets
        self.requested: list[str] = []

    def resolve_public_asset(self, token: str) -> Asset:
        self.requested.append(token)
        try:
            return self.assets[token]
        except KeyError:
            raise NotFound("Asset not found or not public") from None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("abc123", "abc123"),
        ("  abc123  ", "abc123"),
        ("https://host.example/assets/public/abc123", "abc123"),
        ("https://host.example/assets/public/abc123/", "abc123"),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_share_token(raw, expected) -> None:
    assert extract_share_token(raw) == expected


def test_empty_link_is_rejected_before_any_request() -> None:
    client = FakeClient({})
    resolver = ShareLinkResolver(client)

    with pytest.raises(ValidationFailure, match="Please enter a shared link"):
        resolver.resolve("   ")

    assert client.requested == []


def test_resolve_installs_preview_and_collapses_context() -> None:
    resolver = ShareLinkResolver(FakeClient({"tok": _asset("a")}))
    resolver.preview_state.toggle("old")

    asset = resolver.resolve("tok")

    assert resolver.preview_asset is asset
    assert resolver.preview_state.active_id is None
    assert resolver.shows_model_control


def test_last_issued_request_wins() -> None:
    resolver = ShareLinkResolver()
    first = resolver.begin("one")
    second = resolver.begin("two")

    assert resolver.complete(second, _asset("b"))
    assert not resolver.complete(first, _asset("a"))
    assert resolver.preview_asset.id == "b"


def test_stale_failures_are_ignored() -> None:
    resolver = ShareLinkResolver()
    first = resolver.begin("one")
    second = resolver.begin("two")

    assert resolver.fail(first, NetworkFailure("boom")) is None
    assert resolver.fail(second, NotFound("Asset not found or not public")) == "Asset not found or not public"


def test_failure_keeps_previous_preview() -> None:
    resolver = ShareLinkResolver(FakeClient({"tok": _asset("a")}))
    resolver.resolve("tok")

    with pytest.raises(NotFound):
        resolver.resolve("missing")

    assert resolver.preview_asset.id == "a"


def test_unexpected_errors_use_default_message() -> None:
    resolver = ShareLinkResolver()
    request = resolver.begin("tok")

    assert resolver.fail(request, ValueError("bad json")) == DEFAULT_SHARE_ERROR


def test_non_model_preview_hides_model_control() -> None:
    resolver = ShareLinkResolver(FakeClient({"tok": _asset("t", "uploads/textures")}))

    resolver.resolve("tok")

    assert not resolver.shows_model_control


def test_clear_invalidates_in_flight_requests() -> None:
    resolver = ShareLinkResolver()
    request = resolver.begin("tok")

    resolver.clear()

    assert not resolver.complete(request, _asset("a"))
    assert resolver.preview_asset is None
