"""Interactive 3D model viewer using QOpenGLWidget.

Minimal real-time viewport to orbit (left drag), pan (right drag) and zoom
(mouse wheel) around decoded :class:`~arvr_assets.rendering.decoders.SceneData`.
The scene is lit by one ambient term and one directional light.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtGui import QMatrix4x4, QVector3D
from PySide6.QtOpenGL import (
    QOpenGLBuffer,
    QOpenGLShader,
    QOpenGLShaderProgram,
    QOpenGLVertexArrayObject,
)
from PySide6.QtOpenGLWidgets import QOpenGLWidget

from ..rendering.decoders import SceneData
from ..rendering.formats import DecoderKind

__all__ = [
    "AMBIENT_INTENSITY",
    "DEFAULT_SURFACE_COLOR",
    "LIGHT_DIRECTION",
    "ModelViewer",
    "model_transform",
]

logger = logging.getLogger(__name__)

AMBIENT_INTENSITY = 0.5
"""Strength of the single ambient light."""

LIGHT_DIRECTION = (2.0, 2.0, 2.0)
"""Direction of the single directional light, in view-independent world space."""

DEFAULT_SURFACE_COLOR = (0.72, 0.82, 0.94)
"""Color used for decoders whose material is not rendered."""

FIELD_OF_VIEW = 45.0

BACKGROUND_COLOR = (0.96, 0.96, 0.97)


VERT_SHADER = """
#version 330 core
layout(location = 0) in vec3 position;
layout(location = 1) in vec3 normal;

uniform mat4 u_mvp;
uniform mat4 u_model;
uniform vec3 u_lightDir;
uniform float u_ambient;

out float v_lighting;

void main() {
    gl_Position = u_mvp * vec4(position, 1.0);
    vec3 n = normalize((u_model * vec4(normal, 0.0)).xyz);
    float diffuse = max(dot(n, normalize(u_lightDir)), 0.0);
    v_lighting = u_ambient + diffuse;
}
"""


FRAG_SHADER = """
#version 330 core
in float v_lighting;
uniform vec3 u_color;
out vec4 fragColor;

void main() {
    fragColor = vec4(u_color * clamp(v_lighting, 0.0, 1.5), 1.0);
}
"""

# OpenGL enums (defined locally to avoid a PyOpenGL dependency)
_GL_DEPTH_TEST = 0x0B71
_GL_COLOR_BUFFER_BIT = 0x00004000
_GL_DEPTH_BUFFER_BIT = 0x00000100
_GL_FLOAT = 0x1406
_GL_TRIANGLES = 0x0004
_GL_UNSIGNED_INT = 0x1405


class ModelViewer(QOpenGLWidget):
    """Draw one decoded asset scene and report drawing failures."""

    renderFailed = Signal(object)
    """Emitted with the exception raised while drawing the scene."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._scene: SceneData | None = None
        self._program: QOpenGLShaderProgram | None = None
        self._vao: QOpenGLVertexArrayObject | None = None
        self._vbo: QOpenGLBuffer | None = None
        self._ebo: QOpenGLBuffer | None = None
        self._uploaded_scene: SceneData | None = None
        self._last_pos = QPoint()
        self._yaw = 0.0
        self._pitch = 0.0
        self._distance = 3.5
        self._frame_radius = 1.0
        self._pan_x = 0.0
        self._pan_y = 0.0
        self._user_modified = False
        self._failed = False
        self.setMinimumHeight(220)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def scene(self) -> SceneData | None:
        return self._scene

    @property
    def camera(self) -> tuple[float, float, float, float, float]:
        """Return ``(yaw, pitch, distance, pan_x, pan_y)``."""

        return self._yaw, self._pitch, self._distance, self._pan_x, self._pan_y

    def set_scene(self, scene: SceneData) -> None:
        self._scene = scene
        self._frame_radius = model_transform(scene)[1]
        self._yaw = 0.0
        self._pitch = 0.0
        self._pan_x = 0.0
        self._pan_y = 0.0
        self._user_modified = False
        self._fit_to_view()
        self.update()

    def clear(self) -> None:
        self._scene = None
        self.update()

    def orbit(self, dx: float, dy: float) -> None:
        self._yaw += dx * 0.5
        self._pitch = max(-89.0, min(89.0, self._pitch + dy * 0.5))
        self._user_modified = True
        self.update()

    def pan(self, dx: float, dy: float) -> None:
        self._pan_x += dx * 0.002 * self._distance
        self._pan_y -= dy * 0.002 * self._distance
        self._user_modified = True
        self.update()

    def zoom(self, steps: float) -> None:
        nearest, farthest = 0.2 * self._frame_radius, 100.0 * self._frame_radius
        self._distance = float(max(nearest, min(farthest, self._distance * (0.9**steps))))
        self._user_modified = True
        self.update()

    # ------------------------------------------------------------------
    # QOpenGLWidget overrides
    # ------------------------------------------------------------------
    def initializeGL(self) -> None:  # pragma: no cover - requires GL context
        try:
            self._program = QOpenGLShaderProgram(self.context())
            self._program.addShaderFromSourceCode(QOpenGLShader.Vertex, VERT_SHADER)
            self._program.addShaderFromSourceCode(QOpenGLShader.Fragment, FRAG_SHADER)
            if not self._program.link():
                raise RuntimeError(f"Shader link failed: {self._program.log()}")
            self.funcs = self.context().functions()
            self.funcs.glEnable(_GL_DEPTH_TEST)
        except Exception as exc:  # noqa: BLE001 - reported to the failure boundary
            self._report_failure(exc)

    def resizeGL(self, w: int, h: int) -> None:  # pragma: no cover
        del w, h
        if self._scene is not None and not self._user_modified:
            self._fit_to_view()

    def paintGL(self) -> None:  # pragma: no cover - visual
        if self._failed:
            return
        try:
            self._paint_scene()
        except Exception as exc:  # noqa: BLE001 - reported to the failure boundary
            self._report_failure(exc)

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def mousePressEvent(self, event):  # type: ignore[override]
        self._last_pos = event.position().toPoint()

    def mouseMoveEvent(self, event):  # type: ignore[override]
        delta = event.position().toPoint() - self._last_pos
        self._last_pos = event.position().toPoint()
        if event.buttons() & Qt.LeftButton:
            self.orbit(delta.x(), delta.y())
        elif event.buttons() & Qt.RightButton:
            self.pan(delta.x(), delta.y())

    def wheelEvent(self, event):  # type: ignore[override]
        self.zoom(event.angleDelta().y() / 120.0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _report_failure(self, exc: BaseException) -> None:
        if self._failed:
            return
        self._failed = True
        logger.error("Model viewer failed to render: %s", exc)
        self.renderFailed.emit(exc)

    def _paint_scene(self) -> None:  # pragma: no cover - visual
        gl = self.funcs
        gl.glViewport(0, 0, self.width(), self.height())
        gl.glClearColor(*BACKGROUND_COLOR, 1.0)
        gl.glClear(_GL_COLOR_BUFFER_BIT | _GL_DEPTH_BUFFER_BIT)

        if self._program is None or self._scene is None:
            return

        mvp, model = self.compute_matrices()
        color = self._scene.color or DEFAULT_SURFACE_COLOR

        self._program.bind()
        self._program.setUniformValue("u_mvp", mvp)
        self._program.setUniformValue("u_model", model)
        self._program.setUniformValue("u_lightDir", *LIGHT_DIRECTION)
        self._program.setUniformValue("u_ambient", AMBIENT_INTENSITY)
        self._program.setUniformValue("u_color", *color)

        if self._uploaded_scene is not self._scene:
            self._upload_buffers(self._scene)
        self._vao.bind()
        gl.glDrawElements(_GL_TRIANGLES, int(self._scene.indices.size), _GL_UNSIGNED_INT, 0)
        self._vao.release()
        self._program.release()

    def _upload_buffers(self, scene: SceneData) -> None:  # pragma: no cover - requires GL context
        self._release_buffers()

        interleaved = np.hstack([scene.vertices, scene.normals]).astype(np.float32)
        indices = scene.indices.astype(np.uint32)
        stride = interleaved.shape[1] * 4

        self._vao = QOpenGLVertexArrayObject(self)
        self._vao.create()
        self._vao.bind()

        self._vbo = QOpenGLBuffer(QOpenGLBuffer.VertexBuffer)
        self._vbo.create()
        self._vbo.bind()
        self._vbo.allocate(interleaved.tobytes(), interleaved.nbytes)

        self._ebo = QOpenGLBuffer(QOpenGLBuffer.IndexBuffer)
        self._ebo.create()
        self._ebo.bind()
        self._ebo.allocate(indices.tobytes(), indices.nbytes)

        self._program.enableAttributeArray(0)
        self._program.setAttributeBuffer(0, _GL_FLOAT, 0, 3, stride)
        self._program.enableAttributeArray(1)
        self._program.setAttributeBuffer(1, _GL_FLOAT, 12, 3, stride)

        self._vao.release()
        self._uploaded_scene = scene

    def _release_buffers(self) -> None:
        for buffer in (self._ebo, self._vbo, self._vao):
            if buffer is not None:
                buffer.destroy()
        self._vao = self._vbo = self._ebo = None
        self._uploaded_scene = None

    def compute_matrices(self) -> tuple[QMatrix4x4, QMatrix4x4]:
        """Return the ``(mvp, model)`` matrices for the current camera."""

        w, h = max(1, self.width()), max(1, self.height())
        aspect = w / h

        yaw_r = math.radians(self._yaw)
        pitch_r = math.radians(self._pitch)
        eye = np.array(
            [
                math.cos(yaw_r) * math.cos(pitch_r),
                math.sin(pitch_r),
                math.sin(yaw_r) * math.cos(pitch_r),
            ],
            dtype=np.float32,
        ) * self._distance
        target = np.array([self._pan_x, self._pan_y, 0.0], dtype=np.float32)

        view = QMatrix4x4()
        view.lookAt(_to_vec3(eye + target), _to_vec3(target), QVector3D(0.0, 1.0, 0.0))

        proj = QMatrix4x4()
        proj.perspective(FIELD_OF_VIEW, float(aspect), 0.01 * self._frame_radius, 1000.0 * self._frame_radius)

        model = QMatrix4x4()
        model.setToIdentity()
        if self._scene is not None:
            model.scale(model_transform(self._scene)[0])
            model.translate(
                -float(self._scene.center[0]),
                -float(self._scene.center[1]),
                -float(self._scene.center[2]),
            )

        return proj * view * model, model

    def _fit_to_view(self) -> None:
        w, h = max(1, self.width()), max(1, self.height())
        aspect = w / h
        tan_v = math.tan(math.radians(FIELD_OF_VIEW) / 2.0)
        tan_h = tan_v * aspect
        d_v = 1.0 / max(tan_v, 1e-6)
        d_h = 1.0 / max(tan_h, 1e-6)
        self._distance = float(max(d_v, d_h) * 1.15 * self._frame_radius)

    def cleanup(self) -> None:
        """Release GL resources; call before the widget is destroyed."""

        context = self.context()
        if context is not None and context.isValid():
            self.makeCurrent()
            try:
                self._release_buffers()
            finally:
                self.doneCurrent()
        else:
            self._vao = self._vbo = self._ebo = None
            self._uploaded_scene = None


def model_transform(scene: SceneData) -> tuple[float, float]:
    """Return ``(model_scale, frame_radius)`` used to draw *scene*.

    Raw geometry keeps its own units and the camera is framed on its bounding
    sphere. Other decoders are normalised into a unit sphere before their
    display scale is applied, inside a unit camera frame.
    """

    radius = max(float(scene.radius), 1e-6)
    if scene.decoder is DecoderKind.RAW_GEOMETRY:
        return float(scene.scale), radius * float(scene.scale)
    return float(scene.scale) / radius, 1.0


def _to_vec3(arr: np.ndarray) -> QVector3D:
    return QVector3D(float(arr[0]), float(arr[1]), float(arr[2]))
