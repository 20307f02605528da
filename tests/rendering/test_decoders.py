from __future__ import annotations

import numpy as np
import pytest
import trimesh

from arvr_assets.errors import DecodeFailure
from arvr_assets.rendering import decoders
from arvr_assets.rendering.decoders import build_scene_data, decode_scene
from arvr_assets.rendering.formats import FORMAT_DECODERS, NEUTRAL_MATERIAL, DecoderKind

ASCII_STL = b"""solid tri
facet normal 0 0 1
  outer loop
    vertex 0 0 0
    vertex 1 0 0
    vertex 0 1 0
  endloop
endfacet
facet normal 0 0 1
  outer loop
    vertex 1 0 0
    vertex 1 1 0
    vertex 0 1 0
  endloop
endfacet
endsolid tri
"""

OBJ_TEXT = b"""v 0 0 0
v 1 0 0
v 0 1 0
v 0 0 1
f 1 2 3
f 1 2 4
f 1 3 4
f 2 3 4
"""


def test_decode_stl_uses_neutral_material() -> None:
    scene = decode_scene(ASCII_STL, "stl")

    assert scene.decoder is DecoderKind.RAW_GEOMETRY
    assert scene.triangle_count == 2
    assert scene.color == NEUTRAL_MATERIAL.color
    assert scene.scale == 1.0
    assert scene.vertices.dtype == np.float32
    assert scene.indices.dtype == np.uint32


def test_decode_obj_mesh() -> None:
    scene = decode_scene(OBJ_TEXT, "OBJ")

    assert scene.decoder is DecoderKind.MESH
    assert scene.triangle_count == 4
    assert scene.color is None
    assert scene.scale == FORMAT_DECODERS["obj"].scale


def test_decode_glb_scene_graph() -> None:
    data = trimesh.creation.box(extents=(1.0, 2.0, 3.0)).export(file_type="glb")

    scene = decode_scene(data, "glb")

    assert scene.decoder is DecoderKind.SCENE_GRAPH
    assert scene.triangle_count == 12
    assert scene.radius > 0


def test_unsupported_token_never_reaches_a_decoder(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(
        decoders,
        "_DECODERS",
        {kind: (lambda data, token: calls.append(token)) for kind in DecoderKind},
    )

    with pytest.raises(DecodeFailure):
        decode_scene(b"anything", "xyz")

    assert calls == []


def test_dispatch_selects_decoder_by_token(monkeypatch: pytest.MonkeyPatch) -> None:
    used: list[DecoderKind] = []
    triangle = (np.zeros((3, 3), dtype=np.float32) + np.eye(3, dtype=np.float32), np.array([[0, 1, 2]]))

    def recorder(kind: DecoderKind):
        def decode(data: bytes, token: str):
            used.append(kind)
            return triangle

        return decode

    monkeypatch.setattr(decoders, "_DECODERS", {kind: recorder(kind) for kind in DecoderKind})

    decode_scene(b"x", "glb")
    decode_scene(b"x", "dae")
    decode_scene(b"x", "fbx")

    assert used == [DecoderKind.SCENE_GRAPH, DecoderKind.COLLADA_SCENE, DecoderKind.FBX_SCENE]


def test_empty_payload_is_a_decode_failure() -> None:
    with pytest.raises(DecodeFailure):
        decode_scene(b"", "stl")


def test_corrupt_payload_is_a_decode_failure() -> None:
    with pytest.raises(DecodeFailure):
        decode_scene(b"\x00\x01 definitely not a glb", "glb")


def test_fbx_without_sdk_fails_cleanly(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(decoders, "fbx", None)

    with pytest.raises(DecodeFailure, match="FBX"):
        decode_scene(b"Kaydara FBX Binary", "fbx")


def test_build_scene_data_rejects_bad_indices() -> None:
    vertices = np.zeros((3, 3), dtype=np.float32)

    with pytest.raises(DecodeFailure):
        build_scene_data(vertices, np.array([[0, 1, 5]]), FORMAT_DECODERS["obj"])


def test_build_scene_data_normals_are_unit_length() -> None:
    vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=np.float32)

    scene = build_scene_data(vertices, np.array([[0, 1, 2]]), FORMAT_DECODERS["stl"])

    np.testing.assert_allclose(np.linalg.norm(scene.normals, axis=1), 1.0, rtol=1e-5)
    np.testing.assert_allclose(scene.normals[0], [0.0, 0.0, 1.0], atol=1e-6)
