"""
ParticleMorph HUD.
Draws the particle field with OpenCV: perspective projection, additive glow,
celebration balloons on LOVE, and the status / hint overlays.
"""

import colorsys
import math
from typing import Optional

import cv2
import numpy as np

from particle_morph.config import CONFIG
from particle_morph.core.interfaces import IParticleRenderer
from particle_morph.core.types import Gesture, HandState, ParticleField


class PerspectiveCamera:
    """Pinhole camera on +Z looking at the origin (world Y up, screen Y down)."""
    NEAR = 0.1

    def __init__(self, width: int, height: int, distance: float, fov_deg: float):
        self.width, self.height = width, height
        self.distance = distance
        self.focal = (height / 2.0) / math.tan(math.radians(fov_deg) / 2.0)

    def project(self, points: np.ndarray):
        """
        Returns (xs, ys, depth, visible) for (N, 3) world points.
        Points behind the camera or off-screen are flagged invisible.
        """
        depth = self.distance - points[:, 2]
        safe = np.maximum(depth, self.NEAR)
        xs = np.round(self.width / 2.0 + points[:, 0] * self.focal / safe).astype(np.int32)
        ys = np.round(self.height / 2.0 - points[:, 1] * self.focal / safe).astype(np.int32)
        visible = (depth > self.NEAR) & (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        return xs, ys, depth, visible


class BalloonSwarm:
    """Rising, wobbling balloons. Recycled below the screen once they leave the top."""
    TOP = 25.0

    def __init__(self, count: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        count = CONFIG["BALLOON_COUNT"] if count is None else count

        self.positions = np.stack([
            (self.rng.random(count) - 0.5) * 40.0,
            -20.0 - self.rng.random(count) * 30.0,
            (self.rng.random(count) - 0.5) * 20.0,
        ], axis=1)
        self.speed = 0.2 + self.rng.random(count) * 0.3
        self.wobble_offset = self.rng.random(count) * 2.0 * math.pi
        self.wobble_speed = 2.0 + self.rng.random(count)

        # Vibrant reds, pinks and purples (BGR for OpenCV)
        hues = self.rng.random(count) * 0.1 + np.where(self.rng.random(count) > 0.5, 0.0, 0.9)
        self.colors = [
            tuple(int(c * 255) for c in reversed(colorsys.hls_to_rgb(h % 1.0, 0.6, 0.9)))
            for h in hues
        ]

    def update(self, elapsed: float) -> np.ndarray:
        """Moves the swarm one frame and returns the drawn positions (with wobble)."""
        self.positions[:, 1] += self.speed

        escaped = self.positions[:, 1] > self.TOP
        n = int(escaped.sum())
        if n:
            self.positions[escaped, 1] = -20.0 - self.rng.random(n) * 10.0
            self.positions[escaped, 0] = (self.rng.random(n) - 0.5) * 40.0

        drawn = self.positions.copy()
        drawn[:, 0] += np.sin(elapsed * self.wobble_speed + self.wobble_offset) * 0.5
        return drawn


class ParticleHUD(IParticleRenderer):
    # --- THEME COLORS (BGR) ---
    C_WHITE = (255, 255, 255)
    C_DIM = (90, 90, 90)
    C_GREEN = (0, 255, 0)
    C_DARK = (20, 20, 20)

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None):
        self.width = width or CONFIG["WINDOW_WIDTH"]
        self.height = height or CONFIG["WINDOW_HEIGHT"]
        self.camera = PerspectiveCamera(self.width, self.height,
                                        CONFIG["CAMERA_DISTANCE"], CONFIG["CAMERA_FOV"])
        radius = max(1, int(CONFIG["POINT_RADIUS"]))
        self.kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (2 * radius - 1, 2 * radius - 1))
        self.balloons: Optional[BalloonSwarm] = None

    def _draw_glass_panel(self, img, x, y, w, h, color, alpha=0.6):
        """Draws a semi-transparent background."""
        if y + h > img.shape[0] or x + w > img.shape[1] or x < 0 or y < 0: return

        sub_img = img[y:y+h, x:x+w]
        rect = np.full(sub_img.shape, color, dtype=np.uint8)
        img[y:y+h, x:x+w] = cv2.addWeighted(sub_img, 1 - alpha, rect, alpha, 1.0)

    def _draw_particles(self, canvas, field: ParticleField):
        xs, ys, _depth, visible = self.camera.project(field.positions)
        bgr = np.clip(field.colors[visible][:, ::-1], 0.0, 1.0).astype(np.float32)

        # Additive blending: overlapping particles add up and glow
        layer = np.zeros((self.height, self.width, 3), dtype=np.float32)
        np.add.at(layer, (ys[visible], xs[visible]), bgr)

        core = cv2.dilate(layer, self.kernel)
        glow = cv2.GaussianBlur(layer, (0, 0), 3.0) * 6.0
        canvas[:] = np.clip((core + glow) * 255.0, 0, 255).astype(np.uint8)

    def _draw_balloons(self, canvas, elapsed: float):
        drawn = self.balloons.update(elapsed)
        xs, ys, depth, visible = self.camera.project(drawn)
        # Far balloons first so near ones cover them
        for i in np.argsort(-depth):
            if not visible[i]:
                continue
            radius = max(2, int(0.7 * self.camera.focal / depth[i]))
            cv2.circle(canvas, (int(xs[i]), int(ys[i])), radius, self.balloons.colors[i], -1, cv2.LINE_AA)

    def render(self, field: ParticleField, state: HandState, elapsed: float, status: str = ""):
        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self._draw_particles(canvas, field)

        # Celebration only exists while LOVE is held
        if state.gesture == Gesture.LOVE:
            if self.balloons is None:
                self.balloons = BalloonSwarm()
            self._draw_balloons(canvas, elapsed)
        else:
            self.balloons = None

        if status:
            self._draw_glass_panel(canvas, 16, self.height - 50, 260, 34, self.C_DARK, 0.5)
            cv2.putText(canvas, status, (26, self.height - 26),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.55, self.C_WHITE, 1, cv2.LINE_AA)

        if not state.is_tracking:
            hint = "Show Hand to Start"
            (tw, _th), _ = cv2.getTextSize(hint, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 1)
            cv2.putText(canvas, hint, ((self.width - tw) // 2, self.height - 40),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, self.C_DIM, 1, cv2.LINE_AA)
        return canvas

    def draw_fps(self, frame, fps):
        cv2.putText(frame, f"{int(fps)} FPS", (frame.shape[1]-100, 40),
                    cv2.FONT_HERSHEY_PLAIN, 1.2, self.C_GREEN, 1)
