"""Decode raw asset bytes into triangle data the viewer can draw.

Scene-graph (GLTF/GLB), mesh (OBJ), raw geometry (STL) and Collada (DAE)
payloads are parsed with :mod:`trimesh`. FBX payloads go through the optional
Autodesk FBX SDK when it is installed.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import trimesh

from ..errors import DecodeFailure
from .formats import DecoderKind, DecoderSpec, normalize_token, resolve_decoder

try:  # pragma: no cover - optional dependency
    import fbx  # type: ignore
except Exception:  # pragma: no cover - gracefully ignore when absent
    fbx = None  # type: ignore

__all__ = [
    "MAX_TRIANGLES",
    "SceneData",
    "build_scene_data",
    "decode_scene",
]

logger = logging.getLogger(__name__)

MAX_TRIANGLES = 150_000
"""Triangle budget above which meshes are decimated before upload to the GPU."""


@dataclass(slots=True)
class SceneData:
    vertices: np.ndarray  # (N, 3) float32
    normals: np.ndarray  # (N, 3) float32
    indices: np.ndarray  # (M,) uint32
    center: np.ndarray  # (3,) float32
    radius: float
    scale: float
    color: tuple[float, float, float] | None
    decoder: DecoderKind

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)


Arrays = tuple[np.ndarray, np.ndarray]


def _load_with_trimesh(data: bytes, file_type: str) -> Arrays:
    try:
        loaded = trimesh.load(io.BytesIO(data), file_type=file_type)
    except Exception as exc:  # noqa: BLE001 - trimesh raises a wide range of errors
        raise DecodeFailure(f"Could not parse {file_type.upper()} data: {exc}") from exc

    if isinstance(loaded, trimesh.Scene):
        meshes = [
            geometry
            for geometry in loaded.dump()
            if isinstance(geometry, trimesh.Trimesh) and len(geometry.faces)
        ]
        if not meshes:
            raise DecodeFailure(f"{file_type.upper()} scene contains no triangle meshes.")
        mesh = trimesh.util.concatenate(meshes)
    else:
        mesh = loaded

    if not isinstance(mesh, trimesh.Trimesh):
        raise DecodeFailure(f"{file_type.upper()} data did not produce a mesh.")

    vertices = np.asarray(mesh.vertices, dtype=np.float32)
    faces = np.asarray(mesh.faces, dtype=np.int32)
    if vertices.size == 0 or faces.size == 0:
        raise DecodeFailure(f"{file_type.upper()} mesh is empty.")
    return vertices, faces


def _decode_scene_graph(data: bytes, token: str) -> Arrays:
    return _load_with_trimesh(data, token)


def _decode_mesh(data: bytes, token: str) -> Arrays:
    return _load_with_trimesh(data, token)


def _decode_raw_geometry(data: bytes, token: str) -> Arrays:
    return _load_with_trimesh(data, token)


def _decode_collada(data: bytes, token: str) -> Arrays:
    return _load_with_trimesh(data, "dae")


def _decode_fbx(data: bytes, token: str) -> Arrays:
    if fbx is None:
        raise DecodeFailure("Autodesk FBX SDK is not available, so FBX previews are disabled.")

    # The SDK only imports from disk.
    fd, temp_name = tempfile.mkstemp(suffix=".fbx")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        result = _load_fbx_arrays(temp_path)
    finally:
        temp_path.unlink(missing_ok=True)

    if result is None:
        raise DecodeFailure("Could not parse FBX mesh.")
    return result


def _load_fbx_arrays(path: Path) -> Arrays | None:
    manager = fbx.FbxManager.Create()
    if manager is None:
        return None
    try:
        ios = fbx.FbxIOSettings.Create(manager, fbx.IOSROOT)
        manager.SetIOSettings(ios)

        importer = fbx.FbxImporter.Create(manager, "")
        if importer is None:
            return None
        try:
            if not importer.Initialize(str(path), -1, manager.GetIOSettings()):
                return None

            scene = fbx.FbxScene.Create(manager, "scene")
            if scene is None or not importer.Import(scene):
                return None

            root = scene.GetRootNode()
            if root is None:
                return None

            vertices: list[np.ndarray] = []
            faces: list[list[int]] = []
            offset = 0

            def visit(node) -> None:  # type: ignore[no-untyped-def]
                nonlocal offset
                if node is None:
                    return
                attr = node.GetNodeAttribute()
                if attr is not None and attr.GetAttributeType() == fbx.FbxNodeAttribute.eMesh:
                    mesh = node.GetMesh()
                    count = mesh.GetControlPointsCount() if mesh is not None else 0
                    if count:
                        points = mesh.GetControlPoints()
                        verts = np.array(
                            [(float(points[i][0]), float(points[i][1]), float(points[i][2])) for i in range(count)],
                            dtype=np.float32,
                        )
                        tris: list[list[int]] = []
                        for poly in range(mesh.GetPolygonCount()):
                            size = mesh.GetPolygonSize(poly)
                            if size < 3:
                                continue
                            ring = [int(mesh.GetPolygonVertex(poly, j)) for j in range(size)]
                            for j in range(1, size - 1):
                                tris.append([ring[0] + offset, ring[j] + offset, ring[j + 1] + offset])
                        if tris:
                            vertices.append(verts)
                            faces.extend(tris)
                            offset += count
                for i in range(node.GetChildCount()):
                    visit(node.GetChild(i))

            visit(root)

            if not vertices or not faces:
                return None
            return np.vstack(vertices).astype(np.float32), np.asarray(faces, dtype=np.int32)
        finally:
            importer.Destroy()
    finally:
        manager.Destroy()


_DECODERS: dict[DecoderKind, Callable[[bytes, str], Arrays]] = {
    DecoderKind.SCENE_GRAPH: _decode_scene_graph,
    DecoderKind.MESH: _decode_mesh,
    DecoderKind.RAW_GEOMETRY: _decode_raw_geometry,
    DecoderKind.FBX_SCENE: _decode_fbx,
    DecoderKind.COLLADA_SCENE: _decode_collada,
}


def _simplify_if_needed(vertices: np.ndarray, faces: np.ndarray, max_triangles: int) -> Arrays:
    if len(faces) <= max_triangles:
        return vertices, faces

    try:
        simplified = trimesh.Trimesh(vertices=vertices, faces=faces, process=False).simplify_quadric_decimation(
            face_count=max_triangles
        )
    except Exception as exc:  # noqa: BLE001 - decimation backend is optional
        logger.warning("Mesh simplification failed (%s); rendering %d triangles", exc, len(faces))
        return vertices, faces
    return simplified.vertices.astype(np.float32), simplified.faces.astype(np.int32)


def build_scene_data(
    vertices: np.ndarray,
    faces: np.ndarray,
    spec: DecoderSpec,
    *,
    max_triangles: int = MAX_TRIANGLES,
) -> SceneData:
    """Return :class:`SceneData` with smooth normals and framing information."""

    vertices = np.asarray(vertices, dtype=np.float32)
    faces = np.asarray(faces, dtype=np.int32)
    if faces.ndim != 2 or faces.shape[1] != 3 or faces.size == 0:
        raise DecodeFailure("Decoded geometry has no triangles.")
    if faces.max() >= len(vertices) or faces.min() < 0:
        raise DecodeFailure("Decoded geometry references missing vertices.")

    vertices, faces = _simplify_if_needed(vertices, faces, max_triangles)

    tris = vertices[faces]
    face_normals = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    normals = np.zeros_like(vertices, dtype=np.float32)
    for corner in range(3):
        np.add.at(normals, faces[:, corner], face_normals)
    lengths = np.linalg.norm(normals, axis=1)
    valid = lengths > 0
    normals[valid] /= lengths[valid][:, None]

    center = vertices.mean(axis=0).astype(np.float32)
    radius = float(np.linalg.norm(vertices - center, axis=1).max())

    return SceneData(
        vertices=vertices,
        normals=normals.astype(np.float32),
        indices=faces.astype(np.uint32).ravel(),
        center=center,
        radius=radius if radius > 0 else 1.0,
        scale=spec.scale,
        color=spec.material.color if spec.material is not None else None,
        decoder=spec.kind,
    )


def decode_scene(data: bytes, token: str) -> SceneData:
    """Decode *data* according to the format named by *token*.

    Raises :class:`~arvr_assets.errors.DecodeFailure` for unsupported tokens,
    empty payloads and anything the underlying parser rejects.
    """

    normalized = normalize_token(token)
    spec = resolve_decoder(normalized)
    if spec is None:
        raise DecodeFailure(f"No decoder registered for '{normalized or token}'.")
    if not data:
        raise DecodeFailure("Model data is empty.")

    vertices, faces = _DECODERS[spec.kind](data, normalized)
    scene = build_scene_data(vertices, faces, spec)
    logger.debug(
        "Decoded %s payload with %s: %d vertices, %d triangles",
        normalized,
        spec.kind.value,
        len(scene.vertices),
        scene.triangle_count,
    )
    return scene
