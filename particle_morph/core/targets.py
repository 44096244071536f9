"""
ParticleMorph Target Fields.
============================

Every gesture owns one destination layout for the particle field:

* RESET -> a dim, volumetric cloud (uniform inside a sphere).
* ONE / TWO / THREE -> the digits "1", "2", "3".
* LOVE -> "I ❤ U" with white letters and a red heart.

Text fields are made by rasterizing the string with OpenCV, collecting the
lit pixels, and letting every particle slot pick one of them at random
(with replacement). The result is an unordered point cloud that follows the
glyph silhouette: particle `i` has no meaning beyond "slot i".

Fields never change once generated, so `TargetLibrary` builds each one on
first request and hands out the same read-only arrays afterwards.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import cv2
import numpy as np

from particle_morph.config import CONFIG
from particle_morph.core.types import Gesture, ParticleTarget

logger = logging.getLogger(__name__)

FONT = cv2.FONT_HERSHEY_SIMPLEX
HEART = "❤"

GESTURE_TEXT = {
    Gesture.ONE: "1",
    Gesture.TWO: "2",
    Gesture.THREE: "3",
    Gesture.LOVE: f"I {HEART} U",
}


@dataclass
class Glyph:
    token: str
    offset: float                      # Horizontal offset of the glyph center, in px
    color: Tuple[float, float, float]  # Normalized RGB

    @property
    def is_heart(self) -> bool:
        return self.token.startswith(HEART)


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


def _font_scale(font_size: int, thickness: int) -> float:
    return cv2.getFontScaleFromHeight(FONT, int(font_size), int(thickness))


def _heart_outline(n: int = 200) -> np.ndarray:
    """Classic parametric heart, Y up, roughly 32 x 29 units."""
    u = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
    hx = 16.0 * np.sin(u) ** 3
    hy = 13.0 * np.cos(u) - 5.0 * np.cos(2 * u) - 2.0 * np.cos(3 * u) - np.cos(4 * u)
    return np.stack([hx, hy], axis=1)


# Vertical extent of the outline above, used to fit it to the font size
HEART_HEIGHT = 29.0
HEART_CENTER_Y = -2.5


def _glyph_width(glyph: Glyph, font_size: int, thickness: int) -> int:
    if glyph.is_heart:
        return int(math.ceil(32.0 * font_size / HEART_HEIGHT))
    (w, _h), _base = cv2.getTextSize(glyph.token, FONT, _font_scale(font_size, thickness), thickness)
    return w + thickness


def layout_glyphs(text: str, font_size: int, spacing: float,
                  text_color, heart_color) -> List[Glyph]:
    """
    Splits the text on whitespace and spaces the tokens `spacing * font_size`
    apart around the canvas center. A single token sits dead center.
    """
    tokens = text.split()
    if not tokens:
        return []
    step = spacing * font_size
    first = -step * (len(tokens) - 1) / 2.0
    glyphs = []
    for i, token in enumerate(tokens):
        color = heart_color if token.startswith(HEART) else text_color
        glyphs.append(Glyph(token, first + i * step, tuple(color)))
    return glyphs


def _draw_glyph(layer: np.ndarray, glyph: Glyph, cx: float, cy: float,
                font_size: int, thickness: int):
    # OpenCV draws in BGR
    bgr = tuple(int(round(c * 255)) for c in reversed(glyph.color))

    if glyph.is_heart:
        # Hershey fonts have no heart, so draw the outline as a filled polygon
        s = font_size / HEART_HEIGHT
        outline = _heart_outline()
        pts = np.stack([cx + outline[:, 0] * s,
                        cy - (outline[:, 1] - HEART_CENTER_Y) * s], axis=1)
        cv2.fillPoly(layer, [np.round(pts).astype(np.int32)], bgr, cv2.LINE_AA)
        return

    scale = _font_scale(font_size, thickness)
    (w, h), _base = cv2.getTextSize(glyph.token, FONT, scale, thickness)
    org = (int(round(cx - w / 2.0)), int(round(cy + h / 2.0)))
    cv2.putText(layer, glyph.token, org, FONT, scale, bgr, thickness, cv2.LINE_AA)


def rasterize_text(text: str,
                   font_size: Optional[int] = None,
                   thickness: Optional[int] = None,
                   threshold: Optional[int] = None,
                   cfg: Optional[dict] = None):
    """
    Renders the text and returns its lit pixels.

    Each glyph is drawn on its own black layer in its assigned color; a pixel
    of that layer is lit when any channel exceeds the brightness threshold,
    and it takes the glyph's color (not whatever anti-aliasing left there).

    Args:
        cfg: Settings to read instead of the global CONFIG (font, spacing,
            padding, colors, threshold).

    Returns:
        (xy, rgb, (width, height)): (K, 2) int pixel coords, (K, 3) float colors
        in [0, 1], and the canvas size. K may be 0.
    """
    cfg = cfg if cfg is not None else CONFIG
    font_size = font_size or cfg["FONT_SIZE"]
    thickness = thickness or cfg["FONT_THICKNESS"]
    threshold = cfg["BRIGHTNESS_THRESHOLD"] if threshold is None else threshold

    glyphs = layout_glyphs(text, font_size, cfg["GLYPH_SPACING"],
                           cfg["TEXT_COLOR"], cfg["HEART_COLOR"])

    half_span = max((abs(g.offset) + _glyph_width(g, font_size, thickness) / 2.0 for g in glyphs), default=0.0)
    width = int(math.ceil(2 * half_span)) + cfg["RASTER_PADDING"]
    height = int(math.ceil(font_size * 1.5))
    cx, cy = width / 2.0, height / 2.0

    xy_parts, rgb_parts = [], []
    for glyph in glyphs:
        layer = np.zeros((height, width, 3), dtype=np.uint8)
        _draw_glyph(layer, glyph, cx + glyph.offset, cy, font_size, thickness)
        ys, xs = np.nonzero((layer > threshold).any(axis=2))
        xy_parts.append(np.stack([xs, ys], axis=1))
        rgb_parts.append(np.tile(np.asarray(glyph.color, dtype=np.float32), (len(xs), 1)))

    if xy_parts:
        xy = np.concatenate(xy_parts)
        rgb = np.concatenate(rgb_parts)
    else:
        xy = np.zeros((0, 2), dtype=np.int64)
        rgb = np.zeros((0, 3), dtype=np.float32)

    return xy, rgb, (width, height)


def generate_cloud_particles(particle_count: int,
                             radius: Optional[float] = None,
                             rng: Optional[np.random.Generator] = None,
                             color=None) -> ParticleTarget:
    """
    Uniform points inside a solid sphere.
    r = R * cbrt(u) keeps the density constant with depth.
    """
    rng = rng if rng is not None else np.random.default_rng()
    radius = CONFIG["CLOUD_RADIUS"] if radius is None else radius
    color = CONFIG["CLOUD_COLOR"] if color is None else color

    r = radius * np.cbrt(rng.random(particle_count))
    theta = rng.random(particle_count) * 2.0 * math.pi
    phi = np.arccos(2.0 * rng.random(particle_count) - 1.0)

    positions = np.empty((particle_count, 3), dtype=np.float32)
    positions[:, 0] = r * np.sin(phi) * np.cos(theta)
    positions[:, 1] = r * np.sin(phi) * np.sin(theta)
    positions[:, 2] = r * np.cos(phi)

    colors = np.empty((particle_count, 3), dtype=np.float32)
    colors[:] = color

    return ParticleTarget(_freeze(positions), _freeze(colors))


def generate_text_particles(text: str,
                            particle_count: int,
                            target_width: Optional[float] = None,
                            rng: Optional[np.random.Generator] = None,
                            cfg: Optional[dict] = None) -> ParticleTarget:
    """
    Samples `particle_count` lit pixels (with replacement) and maps them to world space.
    Raster Y grows down, world Y grows up. Z is 0.
    Falls back to the cloud if nothing got rasterized.
    """
    cfg = cfg if cfg is not None else CONFIG
    rng = rng if rng is not None else np.random.default_rng()
    target_width = cfg["TARGET_WIDTH"] if target_width is None else target_width

    xy, rgb, (width, height) = rasterize_text(text, cfg=cfg)
    if len(xy) == 0:
        logger.warning("No lit pixels for %r, using the cloud field instead", text)
        return generate_cloud_particles(particle_count, radius=cfg["CLOUD_RADIUS"], rng=rng,
                                        color=cfg["CLOUD_COLOR"])

    logger.debug("Rasterized %r: %d lit pixels on a %dx%d canvas", text, len(xy), width, height)

    scale = target_width / width
    pick = rng.integers(0, len(xy), size=particle_count)

    positions = np.zeros((particle_count, 3), dtype=np.float32)
    positions[:, 0] = (xy[pick, 0] - width / 2.0) * scale
    positions[:, 1] = -(xy[pick, 1] - height / 2.0) * scale
    colors = rgb[pick].astype(np.float32)

    return ParticleTarget(_freeze(positions), _freeze(colors))


class TargetLibrary(Mapping):
    """
    Gesture -> ParticleTarget, built lazily and never rebuilt.

    Reads are safe from any cadence: an entry is written once and its arrays
    are read-only afterwards.
    """
    def __init__(self, particle_count: Optional[int] = None, rng: Optional[np.random.Generator] = None,
                 config: Optional[dict] = None):
        self.cfg = dict(CONFIG)
        if config:
            self.cfg.update(config)
        self.particle_count = particle_count if particle_count is not None else self.cfg["PARTICLE_COUNT"]
        if self.particle_count <= 0:
            raise ValueError(f"Particle count must be positive, got {self.particle_count}")
        self.rng = rng if rng is not None else np.random.default_rng()
        self._cache = {}

    def _build(self, gesture: Gesture) -> ParticleTarget:
        if gesture == Gesture.RESET:
            return generate_cloud_particles(self.particle_count, radius=self.cfg["CLOUD_RADIUS"],
                                            rng=self.rng, color=self.cfg["CLOUD_COLOR"])
        return generate_text_particles(GESTURE_TEXT[gesture], self.particle_count, rng=self.rng, cfg=self.cfg)

    def target_for(self, gesture) -> ParticleTarget:
        """Unknown labels get the idle cloud."""
        if not isinstance(gesture, Gesture):
            gesture = Gesture.RESET
        target = self._cache.get(gesture)
        if target is None:
            target = self._cache[gesture] = self._build(gesture)
            logger.debug("Built target field for %s", gesture.value)
        return target

    def prewarm(self) -> "TargetLibrary":
        """Builds every field up front so the first switch to a shape is instant."""
        for gesture in Gesture:
            self.target_for(gesture)
        return self

    def __getitem__(self, gesture) -> ParticleTarget:
        if not isinstance(gesture, Gesture):
            raise KeyError(gesture)
        return self.target_for(gesture)

    def __iter__(self) -> Iterator[Gesture]:
        return iter(Gesture)

    def __len__(self) -> int:
        return len(Gesture)
