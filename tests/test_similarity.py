import unittest

from copypose.pose.similarity import JOINT_TRIPLES, score_pose
from copypose.pose.types import KeypointSet, keypoint_set

from fakes import arms_up_pose, standing_pose


class TestScorePose(unittest.TestCase):
	def test_identical_poses_match_with_zero_difference(self):
		res = score_pose(standing_pose(), standing_pose())
		self.assertTrue(res.matched)
		self.assertEqual(res.mean_angle_diff, 0.0)
		self.assertEqual(res.considered_joints, len(JOINT_TRIPLES))

	def test_no_confident_keypoints_is_no_match(self):
		res = score_pose(standing_pose(score=0.1), standing_pose())
		self.assertFalse(res.matched)
		self.assertEqual(res.considered_joints, 0)
		self.assertIsNone(res.mean_angle_diff)

	def test_empty_live_set_is_no_match(self):
		res = score_pose(KeypointSet(), standing_pose())
		self.assertFalse(res.matched)
		self.assertEqual(res.considered_joints, 0)

	def test_score_must_be_strictly_above_threshold(self):
		res = score_pose(standing_pose(score=0.4), standing_pose(), min_score=0.4)
		self.assertEqual(res.considered_joints, 0)

	def test_arms_up_vs_standing(self):
		# Both elbows differ by 90 degrees, the other four joints agree: mean 30.
		res = score_pose(arms_up_pose(), standing_pose(), match_threshold_deg=45.0)
		self.assertAlmostEqual(res.mean_angle_diff, 30.0, places=6)
		self.assertTrue(res.matched)

		strict = score_pose(arms_up_pose(), standing_pose(), match_threshold_deg=10.0)
		self.assertFalse(strict.matched)
		self.assertAlmostEqual(strict.mean_angle_diff, 30.0, places=6)

	def test_threshold_is_strict(self):
		res = score_pose(arms_up_pose(), standing_pose(), match_threshold_deg=30.0)
		self.assertFalse(res.matched)

	def test_low_confidence_joints_are_excluded_not_counted_as_mismatch(self):
		live = arms_up_pose()
		# Hide both wrists: the elbow triples drop out, only matching joints remain.
		hidden = keypoint_set([
			(kp.name, kp.x, kp.y, 0.05 if kp.name.endswith("wrist") else kp.score) for kp in live
		])
		res = score_pose(hidden, standing_pose(), match_threshold_deg=10.0)
		self.assertEqual(res.considered_joints, 4)
		self.assertEqual(res.mean_angle_diff, 0.0)
		self.assertTrue(res.matched)

	def test_missing_reference_joint_is_excluded(self):
		ref = keypoint_set([(kp.name, kp.x, kp.y, kp.score) for kp in standing_pose() if kp.name != "left_knee"])
		res = score_pose(standing_pose(), ref)
		self.assertEqual(res.considered_joints, len(JOINT_TRIPLES) - 1)
		self.assertTrue(res.matched)

	def test_custom_joint_list(self):
		res = score_pose(arms_up_pose(), standing_pose(), joints=[("left_shoulder", "left_elbow", "left_wrist")])
		self.assertEqual(res.considered_joints, 1)
		self.assertAlmostEqual(res.mean_angle_diff, 90.0, places=6)
		self.assertFalse(res.matched)


if __name__ == "__main__":
	unittest.main(verbosity=2)
