from __future__ import annotations

import logging
from typing import List

from copypose.pose.base import EstimatorUnavailable, PoseProvider
from copypose.pose.types import Keypoint, KeypointSet

logger = logging.getLogger(__name__)


COCO17_NAMES = [
	"nose",
	"left_eye",
	"right_eye",
	"left_ear",
	"right_ear",
	"left_shoulder",
	"right_shoulder",
	"left_elbow",
	"right_elbow",
	"left_wrist",
	"right_wrist",
	"left_hip",
	"right_hip",
	"left_knee",
	"right_knee",
	"left_ankle",
	"right_ankle",
]


class MediaPipePoseProvider(PoseProvider):
	"""
	MediaPipe Pose provider that outputs a COCO-17 keypoint set.

	Notes:
	- The COCO names match the names stored in the reference pose files.
	- MediaPipe uses normalized coordinates; we convert to pixel space.
	- `visibility` is used as score.
	- MediaPipe Pose tracks a single person, so at most one set is returned.
	"""

	def __init__(
		self,
		model_complexity: int = 1,
		min_detection_confidence: float = 0.5,
		min_tracking_confidence: float = 0.5,
	) -> None:
		try:
			import mediapipe as mp  # type: ignore
		except ImportError as e:
			raise EstimatorUnavailable(
				"MediaPipe is not installed. Install it with: pip install mediapipe"
			) from e

		self._mp = mp
		try:
			self._pose = mp.solutions.pose.Pose(
				static_image_mode=False,
				model_complexity=int(model_complexity),
				enable_segmentation=False,
				smooth_landmarks=True,
				min_detection_confidence=float(min_detection_confidence),
				min_tracking_confidence=float(min_tracking_confidence),
			)
		except Exception as e:
			raise EstimatorUnavailable(f"MediaPipe Pose could not be initialised: {e!r}") from e
		PL = mp.solutions.pose.PoseLandmark
		self._mapping = {name: int(getattr(PL, name.upper())) for name in COCO17_NAMES}
		logger.info("MediaPipe Pose ready (model_complexity=%d)", int(model_complexity))

	def name(self) -> str:
		return "mediapipe_pose"

	def estimate(self, rgb) -> List[KeypointSet]:
		# rgb: HxWx3
		h, w = int(rgb.shape[0]), int(rgb.shape[1])
		res = self._pose.process(rgb)
		if not res or not getattr(res, "pose_landmarks", None):
			return []

		lm = res.pose_landmarks.landmark
		kps: List[Keypoint] = []
		for name, idx in self._mapping.items():
			if idx >= len(lm):
				continue
			p = lm[idx]
			kps.append(
				Keypoint(
					name=name,
					x=float(p.x) * float(w),
					y=float(p.y) * float(h),
					score=float(getattr(p, "visibility", 0.0) or 0.0),
				)
			)
		return [KeypointSet(keypoints=tuple(kps), width=w, height=h)]

	def close(self) -> None:
		if self._pose is not None:
			self._pose.close()
			self._pose = None
