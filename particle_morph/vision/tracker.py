"""
ParticleMorph Hand Tracker.
Thin wrapper around the MediaPipe Tasks HandLandmarker (VIDEO mode, one hand).

Failures here are never fatal: the tracker keeps a status message for the HUD
and simply reports "no hand", which the pipeline maps to RESET.
"""

import logging
import os
import urllib.request
from typing import Any, Optional

import cv2
import mediapipe as mp

from particle_morph.config import CONFIG, PATHS
from particle_morph.core.interfaces import IHandTracker

logger = logging.getLogger(__name__)


def ensure_model(path=None, url: Optional[str] = None) -> str:
    """Downloads the hand_landmarker.task model on first use and returns its path."""
    path = str(path or PATHS["HAND_MODEL"])
    url = url or CONFIG["HAND_MODEL_URL"]
    if not os.path.exists(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        logger.info("Downloading hand landmarker model -> %s", path)
        # Only a complete download may land on `path`
        partial = path + ".part"
        try:
            urllib.request.urlretrieve(url, partial)
            os.replace(partial, path)
        finally:
            if os.path.exists(partial):
                os.remove(partial)
    return path


class HandTracker(IHandTracker):
    def __init__(self, model_path=None):
        self.landmarker = None
        self._status = "Initializing AI..."
        self._last_ts = -1

        try:
            from mediapipe.tasks.python import BaseOptions
            from mediapipe.tasks.python import vision as mp_vision

            options = mp_vision.HandLandmarkerOptions(
                base_options=BaseOptions(model_asset_path=ensure_model(model_path)),
                running_mode=mp_vision.RunningMode.VIDEO,
                num_hands=CONFIG["MAX_HANDS"],
                min_hand_detection_confidence=CONFIG["MIN_DETECTION_CONFIDENCE"],
                min_hand_presence_confidence=CONFIG["MIN_PRESENCE_CONFIDENCE"],
                min_tracking_confidence=CONFIG["MIN_TRACKING_CONFIDENCE"],
            )
            self.landmarker = mp_vision.HandLandmarker.create_from_options(options)
            self._status = ""
        except Exception:
            logger.exception("Hand landmarker failed to initialize")
            self._status = "AI Init Failed"

    @property
    def status(self) -> str:
        return self._status

    def detect(self, frame: Any, timestamp_ms: int) -> Optional[Any]:
        """
        Runs the landmarker on a BGR frame.

        Returns:
            The first detected hand (list of 21 NormalizedLandmark), or None.
        """
        if self.landmarker is None or frame is None:
            return None

        # VIDEO mode rejects timestamps that do not strictly increase
        timestamp_ms = max(int(timestamp_ms), self._last_ts + 1)
        self._last_ts = timestamp_ms

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        results = self.landmarker.detect_for_video(image, timestamp_ms)

        if results.hand_landmarks:
            # Any hand but the first is ignored
            return results.hand_landmarks[0]
        return None

    def close(self):
        if self.landmarker is not None:
            self.landmarker.close()
            self.landmarker = None
