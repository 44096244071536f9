import unittest

import numpy as np

from particle_morph.core.types import Landmark
from particle_morph.hand_utils import sq_dist, to_coords


class MockHandList:
    """Mimics a MediaPipe NormalizedLandmarkList (points under `.landmark`)."""
    def __init__(self, lms):
        self.landmark = lms


class TestToCoords(unittest.TestCase):
    def test_landmark_objects(self):
        lms = [Landmark(i / 21, 1 - i / 21, 0.1) for i in range(21)]
        coords = to_coords(lms)
        self.assertEqual(coords.shape, (21, 3))
        self.assertAlmostEqual(coords[20, 0], 20 / 21)

    def test_landmark_list_wrapper(self):
        lms = [Landmark(0.5, 0.5) for _ in range(21)]
        self.assertEqual(to_coords(MockHandList(lms)).shape, (21, 3))

    def test_2d_gets_zero_depth(self):
        coords = to_coords(np.ones((21, 2)))
        np.testing.assert_array_equal(coords[:, 2], 0.0)

    def test_degenerate_frames(self):
        self.assertIsNone(to_coords(None))
        self.assertIsNone(to_coords([]))
        self.assertIsNone(to_coords(np.zeros((20, 3))))
        self.assertIsNone(to_coords(np.zeros((21, 4))))
        self.assertIsNone(to_coords(list(range(50))))

    def test_ragged_rows_are_no_hand(self):
        self.assertIsNone(to_coords([[0.1, 0.2]] * 20 + [[0.1]]))

    def test_missing_point_is_no_hand(self):
        lms = [Landmark(0.5, 0.5) for _ in range(21)]
        lms[3] = None
        self.assertIsNone(to_coords(lms))
        lms[3] = "tip"
        self.assertIsNone(to_coords(lms))

    def test_non_numeric_is_no_hand(self):
        self.assertIsNone(to_coords([["a", "b", "c"]] * 21))

    def test_sq_dist_ignores_depth(self):
        coords = np.zeros((21, 3))
        coords[1] = (0.3, 0.4, 9.0)
        self.assertAlmostEqual(sq_dist(coords, 0, 1), 0.25)


if __name__ == '__main__':
    unittest.main()
