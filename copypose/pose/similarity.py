from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from copypose.pose.geometry import angle_at
from copypose.pose.types import KeypointSet


JointTriple = Tuple[str, str, str]

# (proximal, vertex, distal): elbows, knees, then the shoulder angle between
# upper arm and torso on each side.
JOINT_TRIPLES: Tuple[JointTriple, ...] = (
	("left_shoulder", "left_elbow", "left_wrist"),
	("right_shoulder", "right_elbow", "right_wrist"),
	("left_hip", "left_knee", "left_ankle"),
	("right_hip", "right_knee", "right_ankle"),
	("left_elbow", "left_shoulder", "left_hip"),
	("right_elbow", "right_shoulder", "right_hip"),
)


@dataclass(frozen=True)
class SimilarityResult:
	matched: bool
	mean_angle_diff: Optional[float]  # None when no joint could be compared
	considered_joints: int


def _resolve(kps: KeypointSet, triple: JointTriple, min_score: float):
	pts = [kps.get(name) for name in triple]
	if all(p is not None and float(p.score) > min_score for p in pts):
		return pts
	return None


def score_pose(
	live: KeypointSet,
	reference: KeypointSet,
	*,
	min_score: float = 0.4,
	match_threshold_deg: float = 45.0,
	joints: Sequence[JointTriple] = JOINT_TRIPLES,
) -> SimilarityResult:
	"""
	Compare two poses by the mean absolute difference of their joint angles.

	A triple only counts when all three keypoints exist in both sets with
	score > min_score. With nothing to compare the result is a non-match.
	"""
	total = 0.0
	count = 0
	for triple in joints:
		a = _resolve(live, triple, min_score)
		b = _resolve(reference, triple, min_score)
		if a is None or b is None:
			continue
		total += abs(angle_at(*a) - angle_at(*b))
		count += 1

	if not count:
		return SimilarityResult(matched=False, mean_angle_diff=None, considered_joints=0)
	mean = total / count
	return SimilarityResult(matched=mean < float(match_threshold_deg), mean_angle_diff=mean, considered_joints=count)
