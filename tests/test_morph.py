import unittest

import numpy as np

from particle_morph.core.morph import (
    MorphEngine,
    effective_positions,
    idle_offsets,
    morph_rate,
    morph_step,
)
from particle_morph.core.targets import generate_cloud_particles
from particle_morph.core.types import Gesture, ParticleField, ParticleTarget

P = 400


def make_target(positions, colors):
    positions = np.asarray(positions, dtype=np.float32)
    colors = np.asarray(colors, dtype=np.float32)
    positions.flags.writeable = False
    colors.flags.writeable = False
    return ParticleTarget(positions, colors)


class TestMorphConvergence(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(42)
        self.target = make_target(rng.uniform(-10, 10, (P, 3)), rng.uniform(0, 1, (P, 3)))
        # Start every coordinate 1..5 units away, on a random side
        offset = rng.uniform(1, 5, (P, 3)) * rng.choice([-1.0, 1.0], (P, 3))
        self.start = ParticleField(
            positions=(self.target.positions + offset).astype(np.float32),
            colors=np.zeros((P, 3), dtype=np.float32),
        )

    def _check_monotone(self, gesture, steps=25):
        field = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        prev = self.target.positions - field.positions
        for step in range(steps):
            morph_step(field, self.target, gesture, elapsed_time=float(step))
            gap = self.target.positions - field.positions
            # Strictly closer on every axis...
            self.assertTrue(np.all(np.abs(gap) < np.abs(prev)), f"step {step}")
            # ...and never past the target
            self.assertTrue(np.all(np.sign(gap) == np.sign(prev)), f"step {step}")
            prev = gap

    def test_monotone_base_rate(self):
        self._check_monotone(Gesture.ONE)

    def test_monotone_love_rate(self):
        self._check_monotone(Gesture.LOVE)

    def test_love_converges_faster(self):
        slow = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        fast = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        for _ in range(10):
            morph_step(slow, self.target, Gesture.TWO, 0.0)
            morph_step(fast, self.target, Gesture.LOVE, 0.0)
        err_slow = np.abs(self.target.positions - slow.positions).max()
        err_fast = np.abs(self.target.positions - fast.positions).max()
        self.assertLess(err_fast, err_slow)

    def test_colors_use_same_rate(self):
        field = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        morph_step(field, self.target, Gesture.THREE, 0.0)
        np.testing.assert_allclose(field.colors, self.target.colors * 0.1, rtol=1e-5, atol=1e-6)

    def test_single_step_exact(self):
        target = make_target(np.full((2, 3), 10.0), np.ones((2, 3)))
        field = ParticleField(np.zeros((2, 3), np.float32), np.zeros((2, 3), np.float32))
        morph_step(field, target, Gesture.ONE, 0.0)
        np.testing.assert_allclose(field.positions, 1.0, rtol=1e-6)
        morph_step(field, target, Gesture.LOVE, 0.0)
        np.testing.assert_allclose(field.positions, 1.0 + 9.0 * 0.2, rtol=1e-6)

    def test_in_place(self):
        field = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        buf = field.positions
        out = morph_step(field, self.target, Gesture.ONE, 0.0)
        self.assertIs(out, field)
        self.assertIs(field.positions, buf)

    def test_no_teleport_on_switch(self):
        """One frame after a target swap, nobody moved more than rate * gap."""
        field = ParticleField(self.start.positions.copy(), self.start.colors.copy())
        before = field.positions.copy()
        max_gap = np.abs(self.target.positions - before).max()
        morph_step(field, self.target, Gesture.ONE, 0.0)
        self.assertLessEqual(np.abs(field.positions - before).max(), 0.1 * max_gap + 1e-5)

    def test_length_mismatch(self):
        short = make_target(np.zeros((3, 3)), np.zeros((3, 3)))
        with self.assertRaises(ValueError):
            morph_step(self.start, short, Gesture.ONE, 0.0)


class TestIdleBreathing(unittest.TestCase):
    def setUp(self):
        self.cloud = generate_cloud_particles(P, rng=np.random.default_rng(0))

    def test_offsets_bounded(self):
        for t in np.linspace(0.0, 500.0, 60):
            offsets = idle_offsets(P, t)
            self.assertLessEqual(np.abs(offsets).max(), 0.5 + 1e-12)

    def test_effective_target_only_moves_xy_under_reset(self):
        for t in (0.0, 1.7, 42.0):
            eff = effective_positions(self.cloud, Gesture.RESET, t)
            delta = eff - self.cloud.positions
            self.assertLessEqual(np.abs(delta[:, :2]).max(), 0.5 + 1e-5)
            np.testing.assert_array_equal(delta[:, 2], 0.0)

    def test_offset_formula(self):
        t = 3.0
        eff = effective_positions(self.cloud, Gesture.RESET, t)
        i = 7
        self.assertAlmostEqual(eff[i, 0], self.cloud.positions[i, 0] + np.sin(t * 0.5 + i) * 0.5, places=5)
        self.assertAlmostEqual(eff[i, 1], self.cloud.positions[i, 1] + np.cos(t * 0.3 + i * 0.5) * 0.5, places=5)

    def test_offset_overrides(self):
        t, i = 2.0, 4
        idle = {"amplitude": 1.5, "freq_x": 2.0, "freq_y": 1.0, "phase_y": 0.25}
        eff = effective_positions(self.cloud, Gesture.RESET, t, idle)
        self.assertAlmostEqual(eff[i, 0], self.cloud.positions[i, 0] + np.sin(t * 2.0 + i) * 1.5, places=5)
        self.assertAlmostEqual(eff[i, 1], self.cloud.positions[i, 1] + np.cos(t * 1.0 + i * 0.25) * 1.5, places=5)

    def test_no_breathing_for_shapes(self):
        eff = effective_positions(self.cloud, Gesture.ONE, 12.0)
        self.assertIs(eff, self.cloud.positions)

    def test_target_not_modified(self):
        before = self.cloud.positions.copy()
        field = ParticleField.from_target(self.cloud)
        for t in range(20):
            morph_step(field, self.cloud, Gesture.RESET, float(t))
        np.testing.assert_array_equal(self.cloud.positions, before)

    def test_settled_cloud_stays_within_amplitude(self):
        field = ParticleField.from_target(self.cloud)
        for t in np.arange(0.0, 30.0, 1 / 30):
            morph_step(field, self.cloud, Gesture.RESET, t)
        self.assertLessEqual(np.abs(field.positions - self.cloud.positions).max(), 0.5 + 1e-4)


class TestMorphEngine(unittest.TestCase):
    def test_rates(self):
        self.assertEqual(morph_rate(Gesture.LOVE), 0.2)
        for g in (Gesture.RESET, Gesture.ONE, Gesture.TWO, Gesture.THREE):
            self.assertEqual(morph_rate(g), 0.1)

    def test_engine_starts_settled_and_owns_a_copy(self):
        cloud = generate_cloud_particles(P, rng=np.random.default_rng(1))
        engine = MorphEngine(cloud)
        self.assertEqual(engine.particle_count, P)
        np.testing.assert_array_equal(engine.field.positions, cloud.positions)
        self.assertTrue(engine.field.positions.flags.writeable)

    def test_custom_rates(self):
        target = make_target(np.full((1, 3), 10.0), np.ones((1, 3)))
        engine = MorphEngine(make_target(np.zeros((1, 3)), np.zeros((1, 3))), base_rate=0.5, love_rate=1.0)
        engine.step(target, Gesture.ONE, 0.0)
        np.testing.assert_allclose(engine.field.positions, 5.0)
        engine.step(target, Gesture.LOVE, 0.0)
        np.testing.assert_allclose(engine.field.positions, 10.0)

    def test_invalid_rate(self):
        cloud = generate_cloud_particles(4)
        with self.assertRaises(ValueError):
            MorphEngine(cloud, base_rate=0.0)
        with self.assertRaises(ValueError):
            MorphEngine(cloud, love_rate=1.5)

    def test_flat_views_are_read_only(self):
        engine = MorphEngine(generate_cloud_particles(P, rng=np.random.default_rng(2)))
        flat = engine.field.flat_positions
        self.assertEqual(flat.shape, (3 * P,))
        with self.assertRaises(ValueError):
            flat[0] = 1.0


if __name__ == '__main__':
    unittest.main()
