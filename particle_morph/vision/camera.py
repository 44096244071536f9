"""
ParticleMorph Camera Reader.
"""

import logging
import threading
from typing import Optional, Tuple

import cv2
import numpy as np

from particle_morph.config import CONFIG

logger = logging.getLogger(__name__)


class ThreadedCamera:
    """
    Latest-frame camera reader.

    Why this exists:
    cv2.VideoCapture.read() is blocking. If the render loop waits on it, the
    particle animation stutters at camera rate. The reader runs on a daemon
    thread and the loop always takes the freshest frame available.
    """
    def __init__(self, src: Optional[int] = None):
        src = CONFIG["CAMERA_INDEX"] if src is None else src
        self.cap = cv2.VideoCapture(src)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, CONFIG["CAMERA_WIDTH"])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, CONFIG["CAMERA_HEIGHT"])
        self.cap.set(cv2.CAP_PROP_FPS, CONFIG["TARGET_FPS"])

        self.lock = threading.Lock()
        self.ret, self.frame = self.cap.read() if self.cap.isOpened() else (False, None)
        self.running = bool(self.ret)
        self.frame_id = 0

        if self.running:
            threading.Thread(target=self._reader, daemon=True).start()
        else:
            logger.error("Camera %s could not be opened", src)

    @property
    def status(self) -> str:
        return "" if self.running else "Camera Denied/Error"

    def _reader(self):
        """Background thread loop for frame grabbing."""
        while self.running:
            ret, frame = self.cap.read()
            if not ret:
                logger.error("Camera stream ended")
                self.running = False
                break
            # Lock ensures we don't read a half-written frame
            with self.lock:
                self.ret, self.frame = ret, frame
                self.frame_id += 1

    def read(self) -> Tuple[bool, Optional[np.ndarray], int]:
        """
        Returns (ok, frame copy, frame id). Non-blocking.
        The id lets the caller skip frames it has already processed.
        """
        with self.lock:
            frame = self.frame.copy() if self.frame is not None else None
            return self.ret, frame, self.frame_id

    def release(self):
        """Stops the thread and releases hardware."""
        self.running = False
        self.cap.release()
