"""
ParticleMorph Controller.
Acts as the central nervous system: landmarks in, particle buffers out.

Two entry points, each safe to call at its own cadence:
* `on_hand_frame` - tracking cadence. Classifier -> Debouncer -> StateManager.
* `on_render`     - render cadence. StateManager -> TargetLibrary -> MorphEngine.

The debouncer is the only writer of the stable HandState; the render side
only reads it.
"""

import logging
from typing import Any, Optional

import numpy as np

from particle_morph.config import CONFIG
from particle_morph.core.morph import MorphEngine
from particle_morph.core.stabilizer import GestureDebouncer
from particle_morph.core.state_manager import StateManager
from particle_morph.core.targets import TargetLibrary
from particle_morph.core.types import Gesture, HandState, ParticleField
from particle_morph.gesture_engine import GestureClassifier
from particle_morph.hand_utils import to_coords

logger = logging.getLogger(__name__)


class MorphController:
    def __init__(self,
                 particle_count: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None,
                 prewarm: bool = True,
                 config: Optional[dict] = None):
        cfg = dict(CONFIG)
        if config:
            cfg.update(config)
        self.config = cfg

        self.classifier = GestureClassifier(cfg["FINGER_OPEN_FACTOR"], cfg["THUMB_OPEN_FACTOR"])
        self.debouncer = GestureDebouncer(cfg["DEBOUNCE_WINDOW"], cfg["DEBOUNCE_MAJORITY"])
        self.state = StateManager()

        count = particle_count if particle_count is not None else cfg["PARTICLE_COUNT"]
        self.targets = TargetLibrary(count, rng=rng, config=cfg)
        if prewarm:
            self.targets.prewarm()

        self.engine = MorphEngine(self.targets.target_for(Gesture.RESET),
                                  base_rate=cfg["MORPH_RATE"],
                                  love_rate=cfg["MORPH_RATE_LOVE"],
                                  idle={"amplitude": cfg["IDLE_AMPLITUDE"],
                                        "freq_x": cfg["IDLE_FREQ_X"],
                                        "freq_y": cfg["IDLE_FREQ_Y"],
                                        "phase_y": cfg["IDLE_PHASE_Y"]})

        # Raw per-frame label (for HUD / labs only; never drives the morph)
        self.last_raw = Gesture.RESET
        logger.info("Controller ready: %d particles, vote window %d", count, self.debouncer.window)

    @property
    def hand_state(self) -> HandState:
        return self.state.curr_state

    @property
    def field(self) -> ParticleField:
        return self.engine.field

    def on_hand_frame(self, landmarks: Any) -> Optional[HandState]:
        """
        Feeds one tracker result (21 landmarks or None).

        Returns:
            The new stable HandState when the gesture changed, else None.
        """
        coords = to_coords(landmarks)
        self.last_raw = self.classifier.classify(coords)
        emitted = self.debouncer.update(self.last_raw, hand_present=coords is not None)
        if emitted is not None:
            self.state.update_state(emitted)
        return emitted

    def on_render(self, elapsed_time: float) -> ParticleField:
        """Advances the morph by one frame and returns the live field."""
        gesture = self.state.gesture
        if not isinstance(gesture, Gesture):
            gesture = Gesture.RESET
        target = self.targets.target_for(gesture)
        return self.engine.step(target, gesture, elapsed_time)

    def reset(self):
        """Drops the vote history and returns to the idle cloud."""
        self.debouncer.reset()
        self.state.update_state(HandState())
        self.last_raw = Gesture.RESET
