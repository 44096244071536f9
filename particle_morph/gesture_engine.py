"""
ParticleMorph Gesture Engine (The Referee).
===========================================

This module maps one frame of Raw Skeletal Data to one Gesture label.
There is no model here: the decision is a priority-ordered rule table over
the five finger-open bits computed by `FingerKinematics`.

Why ordered rules?
A hand that is halfway between two poses produces an ambiguous bit vector.
Testing the patterns with more open fingers first guarantees that such a
vector never falls through to a less specific match, and the final
catch-all makes the table total: every one of the 32 bit combinations
lands on exactly one label.
"""

from typing import Any, Optional, Tuple

from particle_morph.core.kinematics import FingerKinematics
from particle_morph.core.types import FingerState, Gesture
from particle_morph.hand_utils import to_coords

# Pattern over (thumb, index, middle, ring, pinky).
# True = must be open, False = must be closed, None = don't care.
Pattern = Tuple[Optional[bool], Optional[bool], Optional[bool], Optional[bool], Optional[bool]]

GESTURE_RULES: Tuple[Tuple[str, Pattern, Gesture], ...] = (
    # If the 4 long fingers are open it's an open hand, whatever the thumb does
    ("open_hand",   (None, True, True, True, True),     Gesture.LOVE),
    # Standard 3 (Index + Middle + Ring). Pinky MUST be closed.
    ("three",       (None, True, True, True, False),    Gesture.THREE),
    # Euro 3 (Thumb + Index + Middle). Ring + Pinky MUST be closed.
    ("three_euro",  (True, True, True, False, False),   Gesture.THREE),
    # Peace sign. Thumb is often tucked or out, so it is ignored.
    ("peace",       (None, True, True, False, False),   Gesture.TWO),
    # Gun / L-shape (Thumb + Index).
    ("l_shape",     (True, True, False, False, False),  Gesture.TWO),
    ("point",       (None, True, False, False, False),  Gesture.ONE),
)


def _matches(pattern: Pattern, bits: Tuple[bool, ...]) -> bool:
    return all(want is None or want == bit for want, bit in zip(pattern, bits))


def classify_fingers(fingers: FingerState) -> Gesture:
    """Runs the rule table top to bottom. First hit wins; no hit means RESET."""
    bits = fingers.as_tuple()
    for _name, pattern, gesture in GESTURE_RULES:
        if _matches(pattern, bits):
            return gesture
    return Gesture.RESET


class GestureClassifier:
    """
    Stateless per-frame classifier.

    Attributes:
        kinematics (FingerKinematics): Finger open/closed detector (holds the thresholds).
    """
    def __init__(self, finger_factor: Optional[float] = None, thumb_factor: Optional[float] = None):
        self.kinematics = FingerKinematics(finger_factor, thumb_factor)

    def finger_state(self, landmarks: Any) -> Optional[FingerState]:
        """Finger bits for a frame, or None when there is no usable hand."""
        coords = to_coords(landmarks)
        if coords is None:
            return None
        return self.kinematics.finger_state(coords)

    def classify(self, landmarks: Any) -> Gesture:
        """
        Pipeline: Normalize -> Finger Bits -> Rule Table.

        Args:
            landmarks: 21 landmarks (MediaPipe objects, sequences or an array), or None.

        Returns:
            The gesture for this single frame. Missing or malformed hands are RESET.
        """
        fingers = self.finger_state(landmarks)
        if fingers is None:
            return Gesture.RESET
        return classify_fingers(fingers)
