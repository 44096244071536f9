"""
ParticleMorph Morph Engine.
===========================

Key Concept: "Exponential Approach"
Every frame each particle closes a fixed fraction (`rate`) of the gap to its
target, per axis and per color channel:

    current += (target - current) * rate

This is a first-order low-pass filter. With 0 < rate <= 1 it never
overshoots, so a particle cannot teleport even when the target field is
swapped mid-flight; the switch just shows up as a short glide.

While the hand is in RESET the cloud "breathes": the effective target of
particle i is nudged by a small sin/cos oscillation seeded by i. The nudge is
recomputed from elapsed time every frame and never written back to the
target.
"""

from typing import Optional

import numpy as np

from particle_morph.config import CONFIG
from particle_morph.core.types import Gesture, ParticleField, ParticleTarget


def morph_rate(gesture: Gesture, base_rate: Optional[float] = None, love_rate: Optional[float] = None) -> float:
    """Faster morphing for the open hand so the celebration feels instant."""
    base_rate = CONFIG["MORPH_RATE"] if base_rate is None else base_rate
    love_rate = CONFIG["MORPH_RATE_LOVE"] if love_rate is None else love_rate
    return love_rate if gesture == Gesture.LOVE else base_rate


def idle_offsets(count: int, elapsed_time: float,
                 amplitude: Optional[float] = None,
                 freq_x: Optional[float] = None,
                 freq_y: Optional[float] = None,
                 phase_y: Optional[float] = None) -> np.ndarray:
    """(count, 2) X/Y breathing offsets. Bounded by `amplitude` on each axis."""
    amplitude = CONFIG["IDLE_AMPLITUDE"] if amplitude is None else amplitude
    freq_x = CONFIG["IDLE_FREQ_X"] if freq_x is None else freq_x
    freq_y = CONFIG["IDLE_FREQ_Y"] if freq_y is None else freq_y
    phase_y = CONFIG["IDLE_PHASE_Y"] if phase_y is None else phase_y
    i = np.arange(count, dtype=np.float64)
    offsets = np.empty((count, 2), dtype=np.float64)
    offsets[:, 0] = np.sin(elapsed_time * freq_x + i) * amplitude
    offsets[:, 1] = np.cos(elapsed_time * freq_y + i * phase_y) * amplitude
    return offsets


def effective_positions(target: ParticleTarget, gesture: Gesture, elapsed_time: float,
                        idle: Optional[dict] = None) -> np.ndarray:
    """
    Target positions for this frame, including idle motion for the cloud.
    `idle` holds keyword overrides for `idle_offsets`.
    """
    if gesture != Gesture.RESET:
        return target.positions
    positions = np.array(target.positions, dtype=np.float64)
    positions[:, :2] += idle_offsets(len(positions), elapsed_time, **(idle or {}))
    return positions


def morph_step(field: ParticleField, target: ParticleTarget, gesture: Gesture,
               elapsed_time: float, rate: Optional[float] = None,
               idle: Optional[dict] = None) -> ParticleField:
    """
    Blends the live field toward the target in place and returns it.

    Args:
        field: Live buffers, (P, 3) positions and colors.
        target: Destination field with the same P.
        gesture: The debounced gesture (selects rate and idle motion).
        elapsed_time: Seconds since start, drives the idle oscillation.
        rate: Override for the gesture's default rate.
        idle: Overrides for the idle oscillation (amplitude, freq_x, freq_y, phase_y).
    """
    if len(field) != len(target):
        raise ValueError(f"Field has {len(field)} particles, target has {len(target)}")

    rate = morph_rate(gesture) if rate is None else rate
    goal = effective_positions(target, gesture, elapsed_time, idle)

    field.positions += ((goal - field.positions) * rate).astype(field.positions.dtype, copy=False)
    field.colors += ((target.colors - field.colors) * rate).astype(field.colors.dtype, copy=False)
    return field


class MorphEngine:
    """
    Owns the live ParticleField.

    Attributes:
        field (ParticleField): The buffers the renderer reads after every step.
    """
    def __init__(self, initial: ParticleTarget, base_rate: Optional[float] = None, love_rate: Optional[float] = None,
                 idle: Optional[dict] = None):
        self.base_rate = CONFIG["MORPH_RATE"] if base_rate is None else base_rate
        self.love_rate = CONFIG["MORPH_RATE_LOVE"] if love_rate is None else love_rate
        for name, value in (("base_rate", self.base_rate), ("love_rate", self.love_rate)):
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

        # Keyword overrides for idle_offsets
        self.idle = dict(idle or {})

        # Start settled on the initial shape
        self.field = ParticleField.from_target(initial)

    @property
    def particle_count(self) -> int:
        return len(self.field)

    def step(self, target: ParticleTarget, gesture: Gesture, elapsed_time: float) -> ParticleField:
        rate = morph_rate(gesture, self.base_rate, self.love_rate)
        return morph_step(self.field, target, gesture, elapsed_time, rate=rate, idle=self.idle)
