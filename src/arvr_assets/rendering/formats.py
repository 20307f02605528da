"""Map asset format tokens to the decoder able to render them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

__all__ = [
    "DecoderKind",
    "DecoderSpec",
    "FORMAT_DECODERS",
    "Material",
    "NEUTRAL_MATERIAL",
    "SCENE_SCALE",
    "UNSUPPORTED_MESSAGE",
    "is_supported",
    "normalize_token",
    "resolve_decoder",
]

SCENE_SCALE: Final[float] = 1.5
"""Uniform scale applied to scene-graph and mesh decoders."""

UNSUPPORTED_MESSAGE: Final[str] = "Unsupported file format"
"""Notice rendered instead of a viewer for unmapped tokens."""


class DecoderKind(str, Enum):
    """Decoder families understood by the viewer."""

    SCENE_GRAPH = "scene-graph"
    MESH = "mesh"
    RAW_GEOMETRY = "raw-geometry"
    FBX_SCENE = "fbx-scene"
    COLLADA_SCENE = "collada-scene"


@dataclass(frozen=True, slots=True)
class Material:
    """Flat material applied to geometry that carries none of its own."""

    name: str
    color: tuple[float, float, float]


NEUTRAL_MATERIAL: Final[Material] = Material(name="gray", color=(0.5, 0.5, 0.5))
"""Default material paired with raw STL geometry."""


@dataclass(frozen=True, slots=True)
class DecoderSpec:
    """Describe how a format token is decoded and presented."""

    kind: DecoderKind
    scale: float = SCENE_SCALE
    material: Material | None = None


_SCENE_GRAPH = DecoderSpec(DecoderKind.SCENE_GRAPH)

FORMAT_DECODERS: Final[dict[str, DecoderSpec]] = {
    "gltf": _SCENE_GRAPH,
    "glb": _SCENE_GRAPH,
    "obj": DecoderSpec(DecoderKind.MESH),
    "stl": DecoderSpec(DecoderKind.RAW_GEOMETRY, scale=1.0, material=NEUTRAL_MATERIAL),
    "fbx": DecoderSpec(DecoderKind.FBX_SCENE),
    "dae": DecoderSpec(DecoderKind.COLLADA_SCENE),
}
"""Closed table of supported tokens.

New formats are added here; the MIME type of an asset is never consulted.
"""


def normalize_token(token: str | None) -> str:
    """Return *token* lowercased without surrounding whitespace or a leading dot."""

    if not token:
        return ""
    return str(token).strip().lstrip(".").lower()


def resolve_decoder(token: str | None) -> DecoderSpec | None:
    """Return the decoder for *token* or ``None`` when it is unsupported."""

    return FORMAT_DECODERS.get(normalize_token(token))


def is_supported(token: str | None) -> bool:
    return resolve_decoder(token) is not None
