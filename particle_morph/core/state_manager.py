"""
ParticleMorph State Management.
Single-writer holder for the debounced hand state.
"""
from particle_morph.core.types import Gesture, HandState


class StateManager:
    def __init__(self):
        # --- GESTURE HISTORY ---
        self.prev_state = HandState()
        self.curr_state = HandState()

    @property
    def gesture(self) -> Gesture:
        return self.curr_state.gesture

    @property
    def is_tracking(self) -> bool:
        return self.curr_state.is_tracking

    @property
    def celebrating(self) -> bool:
        """The renderer adds its ornaments while the open hand is held."""
        return self.curr_state.gesture == Gesture.LOVE

    def update_state(self, state: HandState):
        """Only the debouncer's emissions come through here."""
        self.prev_state = self.curr_state
        self.curr_state = state
