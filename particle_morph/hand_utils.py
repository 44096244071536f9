"""
ParticleMorph Landmark Processing Utilities.
============================================

Handles the conversion of whatever the tracker hands us into a plain matrix.
The hand-tracking collaborator may deliver:
1. MediaPipe landmark objects (`.x`, `.y`, `.z` attributes).
2. Raw lists / tuples / CSV rows of floats.
3. An already-built NumPy array.

Anything that does not describe exactly 21 points is treated as "no hand".
"""

import numpy as np
from typing import Any, Optional

from particle_morph.core.types import HandLandmark


def to_coords(landmark_list: Any) -> Optional[np.ndarray]:
    """
    Transforms a hand frame into a (21, 3) float matrix, or None.

    2D input gets z = 0. A frame with the wrong landmark count, or no frame
    at all, returns None so the classifier can map it to RESET.
    """
    if landmark_list is None:
        return None

    # MediaPipe NormalizedLandmarkList keeps the points under `.landmark`
    if hasattr(landmark_list, "landmark"):
        landmark_list = landmark_list.landmark

    try:
        if isinstance(landmark_list, np.ndarray):
            coords = np.asarray(landmark_list, dtype=np.float64)
        else:
            points = list(landmark_list)
            if not points:
                return None
            if hasattr(points[0], "x"):
                coords = np.array([[lm.x, lm.y, getattr(lm, "z", 0.0) or 0.0] for lm in points],
                                  dtype=np.float64)
            else:
                coords = np.asarray(points, dtype=np.float64)
    except (ValueError, TypeError, AttributeError):
        # Ragged rows, missing points, non-numeric values
        return None

    if coords.ndim == 1:
        # Flattened row: 42 (x, y) or 63 (x, y, z) floats
        if coords.size == HandLandmark.COUNT * 3:
            coords = coords.reshape(-1, 3)
        elif coords.size == HandLandmark.COUNT * 2:
            coords = coords.reshape(-1, 2)
        else:
            return None

    if coords.ndim != 2 or coords.shape[0] != HandLandmark.COUNT:
        return None

    if coords.shape[1] == 2:
        coords = np.hstack([coords, np.zeros((coords.shape[0], 1))])
    elif coords.shape[1] != 3:
        return None

    return coords


def sq_dist(coords: np.ndarray, a: int, b: int) -> float:
    """
    Squared planar distance between two landmarks.
    Z from a single camera is only good for relative depth, so it is ignored.
    """
    dx = coords[a, 0] - coords[b, 0]
    dy = coords[a, 1] - coords[b, 1]
    return float(dx * dx + dy * dy)
