import unittest

import numpy as np

from particle_morph.controller import MorphController
from particle_morph.core.types import Gesture, HandState
from tests.hand_fixtures import make_hand

P = 300

ONE_HAND = make_hand(index=True)
LOVE_HAND = make_hand(thumb=True, index=True, middle=True, ring=True, pinky=True)


class TestMorphController(unittest.TestCase):
    def setUp(self):
        self.ctl = MorphController(particle_count=P, rng=np.random.default_rng(9))

    def test_initial_state(self):
        self.assertEqual(self.ctl.hand_state, HandState(Gesture.RESET, False))
        self.assertEqual(len(self.ctl.field), P)

    def test_gesture_reaches_stable_state(self):
        self.assertIsNone(self.ctl.on_hand_frame(ONE_HAND))
        state = self.ctl.on_hand_frame(ONE_HAND)
        self.assertEqual(state, HandState(Gesture.ONE, True))
        self.assertEqual(self.ctl.hand_state.gesture, Gesture.ONE)
        self.assertEqual(self.ctl.last_raw, Gesture.ONE)

    def test_render_morphs_toward_selected_target(self):
        self.ctl.on_hand_frame(ONE_HAND)
        self.ctl.on_hand_frame(ONE_HAND)

        target = self.ctl.targets.target_for(Gesture.ONE)
        before = np.abs(self.ctl.field.positions - target.positions).mean()
        for t in range(30):
            self.ctl.on_render(t / 60.0)
        after = np.abs(self.ctl.field.positions - target.positions).mean()
        self.assertLess(after, before * 0.1)

    def test_losing_the_hand_returns_to_cloud(self):
        for _ in range(3):
            self.ctl.on_hand_frame(LOVE_HAND)
        self.assertTrue(self.ctl.state.celebrating)

        emitted = [self.ctl.on_hand_frame(None) for _ in range(3)]
        states = [s for s in emitted if s is not None]
        self.assertEqual(states, [HandState(Gesture.RESET, False)])
        self.assertFalse(self.ctl.state.celebrating)
        self.assertEqual(self.ctl.state.prev_state.gesture, Gesture.LOVE)

    def test_field_length_constant_across_gestures(self):
        hands = [ONE_HAND, make_hand(index=True, middle=True), LOVE_HAND, None]
        for hand in hands:
            for _ in range(2):
                self.ctl.on_hand_frame(hand)
            field = self.ctl.on_render(1.0)
            self.assertEqual(field.positions.shape, (P, 3))
            self.assertEqual(field.colors.shape, (P, 3))

    def test_no_hand_forever_is_fine(self):
        for t in range(100):
            self.assertIsNone(self.ctl.on_hand_frame(None))
            self.ctl.on_render(t / 30.0)
        self.assertEqual(self.ctl.hand_state.gesture, Gesture.RESET)

    def test_reset(self):
        self.ctl.on_hand_frame(ONE_HAND)
        self.ctl.on_hand_frame(ONE_HAND)
        self.ctl.reset()
        self.assertEqual(self.ctl.hand_state, HandState())
        self.assertEqual(len(self.ctl.debouncer.history), 0)

    def test_config_overrides(self):
        ctl = MorphController(particle_count=P, prewarm=False,
                              config={"DEBOUNCE_WINDOW": 1, "MORPH_RATE": 0.5})
        state = ctl.on_hand_frame(ONE_HAND)
        self.assertEqual(state.gesture, Gesture.ONE)
        self.assertEqual(ctl.engine.base_rate, 0.5)

    def test_field_config_overrides(self):
        ctl = MorphController(particle_count=P, rng=np.random.default_rng(2),
                              config={"CLOUD_RADIUS": 2.0, "TARGET_WIDTH": 4.0, "IDLE_AMPLITUDE": 0.0})
        cloud = ctl.targets.target_for(Gesture.RESET)
        self.assertTrue(np.all(np.linalg.norm(cloud.positions, axis=1) <= 2.0 + 1e-4))

        one = ctl.targets.target_for(Gesture.ONE)
        self.assertTrue(np.all(np.abs(one.positions[:, 0]) <= 2.0 + 1e-4))

        # No breathing: an idle cloud stays put
        start = ctl.field.positions.copy()
        ctl.on_render(3.0)
        np.testing.assert_allclose(ctl.field.positions, start, atol=1e-5)

    def test_malformed_frame_counts_as_no_hand(self):
        bad = make_hand(index=True)
        bad[3] = None
        for _ in range(3):
            self.assertIsNone(self.ctl.on_hand_frame(bad))
        self.assertEqual(self.ctl.hand_state, HandState(Gesture.RESET, False))


if __name__ == '__main__':
    unittest.main()
