import unittest

from particle_morph.core.state_manager import StateManager
from particle_morph.core.types import Gesture, HandState


class TestStateManager(unittest.TestCase):
    def setUp(self):
        """Runs before every test."""
        self.state = StateManager()

    def test_initial_state(self):
        """Verify the system starts idle and not tracking."""
        self.assertEqual(self.state.gesture, Gesture.RESET)
        self.assertFalse(self.state.is_tracking, "System should start NOT TRACKING")
        self.assertFalse(self.state.celebrating)

    def test_state_update(self):
        """Verify history updates correctly."""
        self.state.update_state(HandState(Gesture.ONE, True))
        self.assertEqual(self.state.gesture, Gesture.ONE)
        self.assertEqual(self.state.prev_state.gesture, Gesture.RESET) # History check

        self.state.update_state(HandState(Gesture.LOVE, True))
        self.assertEqual(self.state.gesture, Gesture.LOVE)
        self.assertEqual(self.state.prev_state.gesture, Gesture.ONE)
        self.assertTrue(self.state.celebrating)


if __name__ == '__main__':
    unittest.main()
