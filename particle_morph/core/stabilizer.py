"""
ParticleMorph Stabilization Layer (The Vote).
Turns a flickering per-frame label stream into a stable gesture signal.
"""

import logging
from collections import deque
from typing import Optional

from particle_morph.config import CONFIG
from particle_morph.core.types import Gesture, HandState

logger = logging.getLogger(__name__)


class GestureDebouncer:
    """
    Majority vote over a short rolling window of raw labels.

    A new stable gesture is emitted only when one label holds a strict
    majority of the window AND it differs from the last emitted label.
    With the default window of 3 that means two matching frames, so a
    single misclassified frame never toggles the shape.
    """
    def __init__(self, window: Optional[int] = None, majority: Optional[float] = None):
        self.window = window if window is not None else CONFIG["DEBOUNCE_WINDOW"]
        self.majority = majority if majority is not None else CONFIG["DEBOUNCE_MAJORITY"]
        if self.window < 1:
            raise ValueError(f"Debounce window must be >= 1, got {self.window}")
        if not 0.0 <= self.majority < 1.0:
            raise ValueError(f"Debounce majority must be in [0, 1), got {self.majority}")

        self.history = deque(maxlen=self.window)
        self.state = HandState()

    @property
    def last_gesture(self) -> Gesture:
        return self.state.gesture

    def modal(self):
        """
        Most frequent label in the buffer and its count.
        Tally is recomputed every call; on a tie the label that reaches the top count first keeps it.
        """
        counts = {}
        best, best_count = self.state.gesture, 0
        for g in self.history:
            counts[g] = counts.get(g, 0) + 1
            if counts[g] > best_count:
                best, best_count = g, counts[g]
        return best, best_count

    def update(self, raw_gesture: Gesture, hand_present: bool) -> Optional[HandState]:
        """
        Feeds one frame into the vote.

        Returns:
            The new HandState if the stable gesture changed this frame, else None.
        """
        self.history.append(raw_gesture)
        smooth, votes = self.modal()

        # Threshold is against the full window, not the current fill level
        if votes > self.window * self.majority and smooth != self.state.gesture:
            self.state = HandState(gesture=smooth, is_tracking=hand_present)
            logger.info("Stable gesture -> %s (tracking=%s)", smooth.value, hand_present)
            return self.state
        return None

    def reset(self):
        self.history.clear()
        self.state = HandState()
