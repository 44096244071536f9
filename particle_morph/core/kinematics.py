"""
ParticleMorph Kinematics.
Finger open/closed detection from squared distances.
"""
from typing import Optional

import numpy as np

from particle_morph.config import CONFIG
from particle_morph.core.types import FingerState, HandLandmark as LM
from particle_morph.hand_utils import sq_dist


class FingerKinematics:
    # (tip, pip) pairs for the four long fingers
    FINGERS = {
        "index": (LM.INDEX_TIP, LM.INDEX_PIP),
        "middle": (LM.MIDDLE_TIP, LM.MIDDLE_PIP),
        "ring": (LM.RING_TIP, LM.RING_PIP),
        "pinky": (LM.PINKY_TIP, LM.PINKY_PIP),
    }

    def __init__(self, finger_factor: Optional[float] = None, thumb_factor: Optional[float] = None):
        self.finger_factor = finger_factor if finger_factor is not None else CONFIG["FINGER_OPEN_FACTOR"]
        self.thumb_factor = thumb_factor if thumb_factor is not None else CONFIG["THUMB_OPEN_FACTOR"]

    def palm_scale_sq(self, coords: np.ndarray) -> float:
        """
        Squared Wrist(0) -> Index MCP(5) distance.
        Stable across poses, so it normalizes thresholds for hand size.
        """
        return sq_dist(coords, LM.WRIST, LM.INDEX_MCP)

    def is_finger_open(self, coords: np.ndarray, tip: int, pip: int) -> bool:
        """
        A finger is OPEN if its tip is further from the wrist than its PIP joint.
        The factor adds a hysteresis margin so a finger on the boundary does not flicker.
        """
        return sq_dist(coords, LM.WRIST, tip) > sq_dist(coords, LM.WRIST, pip) * self.finger_factor

    def is_thumb_open(self, coords: np.ndarray) -> bool:
        """A tucked thumb sits close to the Index MCP; an open one is far from it."""
        return sq_dist(coords, LM.THUMB_TIP, LM.INDEX_MCP) > self.palm_scale_sq(coords) * self.thumb_factor

    def finger_state(self, coords: np.ndarray) -> FingerState:
        opened = {name: self.is_finger_open(coords, tip, pip) for name, (tip, pip) in self.FINGERS.items()}
        return FingerState(thumb=self.is_thumb_open(coords), **opened)
