"""
ParticleMorph Types.
Central definition of Data Contracts to prevent circular imports.
"""
from dataclasses import dataclass
from enum import Enum

import numpy as np


# --- LANDMARK INDICES ---
class HandLandmark:
    """MediaPipe hand landmark indices used by the classifier."""
    WRIST = 0
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_TIP = 8
    MIDDLE_PIP = 10
    MIDDLE_TIP = 12
    RING_PIP = 14
    RING_TIP = 16
    PINKY_PIP = 18
    PINKY_TIP = 20

    COUNT = 21


@dataclass
class Landmark:
    """Plain landmark for tests and tools (same shape as NormalizedLandmark)."""
    x: float
    y: float
    z: float = 0.0


# --- GESTURE TYPES ---
class Gesture(Enum):
    RESET = "RESET"  # Fist / no hand
    ONE = "ONE"      # 1 finger
    TWO = "TWO"      # 2 fingers
    THREE = "THREE"  # 3 fingers
    LOVE = "LOVE"    # Open hand


@dataclass(frozen=True)
class FingerState:
    thumb: bool = False
    index: bool = False
    middle: bool = False
    ring: bool = False
    pinky: bool = False

    def as_tuple(self):
        return (self.thumb, self.index, self.middle, self.ring, self.pinky)


@dataclass(frozen=True)
class HandState:
    """The debounced gesture. Written only by the debouncer."""
    gesture: Gesture = Gesture.RESET
    is_tracking: bool = False


# --- PARTICLE TYPES ---
@dataclass(frozen=True)
class ParticleTarget:
    """Where (and in what color) every particle slot should settle.

    Both arrays are (P, 3) float32 and flagged read-only.
    """
    positions: np.ndarray
    colors: np.ndarray

    def __len__(self):
        return len(self.positions)


@dataclass
class ParticleField:
    """The live particle buffers. Mutated in place by the morph engine."""
    positions: np.ndarray
    colors: np.ndarray

    @classmethod
    def from_target(cls, target: ParticleTarget) -> "ParticleField":
        return cls(
            positions=np.array(target.positions, dtype=np.float32, copy=True),
            colors=np.array(target.colors, dtype=np.float32, copy=True),
        )

    def __len__(self):
        return len(self.positions)

    @property
    def flat_positions(self) -> np.ndarray:
        """Read-only 3*P view for buffer-style consumers."""
        view = self.positions.reshape(-1).view()
        view.flags.writeable = False
        return view

    @property
    def flat_colors(self) -> np.ndarray:
        view = self.colors.reshape(-1).view()
        view.flags.writeable = False
        return view
