"""
ParticleMorph Configuration Management.
=======================================

This module defines the tunable parameters of the gesture -> particle pipeline.
The parameters are organized into the same "Layer Cake" the runtime follows:
Perception -> Classification -> Debounce -> Target Fields -> Morph -> Display.

! WARNING !
`PARTICLE_COUNT` is read once when the target fields are generated.
Changing it at runtime has no effect on an already-running controller.
"""

from pathlib import Path
import os

# --- SYSTEM PATHS ---
FILE_PATH = Path(__file__).resolve()
PROJECT_ROOT = FILE_PATH.parent.parent

PATHS = {
    "MODELS_DIR": PROJECT_ROOT / "models",
    "HAND_MODEL": PROJECT_ROOT / "models" / "hand_landmarker.task",
}

# --- MASTER CONFIGURATION ---
CONFIG = {
    # =========================================================
    # LAYER 1: PERCEPTION (Camera + Hand Landmarker)
    # =========================================================
    "CAMERA_INDEX": 0,              # OpenCV device ID
    "CAMERA_WIDTH": 640,
    "CAMERA_HEIGHT": 480,
    "TARGET_FPS": 60,               # Requested camera rate (hardware may cap it)
    "HAND_MODEL_URL": (
        "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
        "hand_landmarker/float16/1/hand_landmarker.task"
    ),
    "MAX_HANDS": 1,                 # Only the first hand is ever classified
    "MIN_DETECTION_CONFIDENCE": 0.6,
    "MIN_PRESENCE_CONFIDENCE": 0.6,
    "MIN_TRACKING_CONFIDENCE": 0.5, # Lower = faster recovery during fast motion

    # =========================================================
    # LAYER 2: CLASSIFIER (The Referee)
    # =========================================================
    "FINGER_OPEN_FACTOR": 1.1,      # Tip must be 10% further (squared) than PIP
    "THUMB_OPEN_FACTOR": 0.6,       # Thumb tip vs Index MCP, relative to palm scale

    # =========================================================
    # LAYER 3: DEBOUNCE (Voting)
    # =========================================================
    "DEBOUNCE_WINDOW": 3,           # Frames in the voting buffer
    "DEBOUNCE_MAJORITY": 0.5,       # Winner needs count > WINDOW * MAJORITY

    # =========================================================
    # LAYER 4: TARGET FIELDS (Shapes)
    # =========================================================
    "PARTICLE_COUNT": 3000,
    "FONT_SIZE": 120,               # Nominal glyph height in raster pixels
    "FONT_THICKNESS": 18,           # Heavy stroke so glyphs read as solid shapes
    "RASTER_PADDING": 60,           # Extra canvas width around the text
    "BRIGHTNESS_THRESHOLD": 30,     # A pixel is lit if any channel > 30/255
    "TARGET_WIDTH": 20.0,           # World units spanned by the raster width
    "CLOUD_RADIUS": 10.0,
    "CLOUD_COLOR": (0.1, 0.15, 0.2),# Dim idle color (dark grey/blueish)
    "TEXT_COLOR": (1.0, 1.0, 1.0),
    "HEART_COLOR": (1.0, 0.0, 0.0),
    "GLYPH_SPACING": 1.2,           # Letter offset from center, in font sizes

    # =========================================================
    # LAYER 5: MORPH PHYSICS
    # =========================================================
    "MORPH_RATE": 0.1,              # Fraction of the remaining gap closed per frame
    "MORPH_RATE_LOVE": 0.2,         # Snappier convergence for the celebration
    "IDLE_AMPLITUDE": 0.5,          # World units of cloud breathing per axis
    "IDLE_FREQ_X": 0.5,
    "IDLE_FREQ_Y": 0.3,
    "IDLE_PHASE_Y": 0.5,            # Per-particle phase step on the Y axis

    # =========================================================
    # LAYER 6: DISPLAY (HUD)
    # =========================================================
    "WINDOW_NAME": "ParticleMorph",
    "WINDOW_WIDTH": 1280,
    "WINDOW_HEIGHT": 720,
    "CAMERA_DISTANCE": 24.0,        # Virtual camera on +Z looking at the origin
    "CAMERA_FOV": 45.0,             # Vertical field of view (degrees)
    "POINT_RADIUS": 2,
    "BALLOON_COUNT": 150,

    "LOG_LEVEL": "INFO",
}


def init_environment():
    """
    Creates necessary directories safely at runtime.
    """
    os.makedirs(PATHS["MODELS_DIR"], exist_ok=True)
