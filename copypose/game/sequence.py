from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence

from copypose.pose.types import KeypointSet

logger = logging.getLogger(__name__)


class ReferenceLoader(Protocol):
	def load_keypoints(self, pose_id: int) -> KeypointSet: ...

	def resolve_image(self, pose_id: int) -> Any: ...


@dataclass(frozen=True)
class ReferencePose:
	id: int
	keypoints: KeypointSet
	image: Any  # opaque handle; a Path for the file loader


def build_sequence(n: int, rng: Optional[random.Random] = None) -> List[int]:
	"""
	Uniformly random permutation of 1..n (Fisher-Yates, last index first).
	"""
	if n < 0:
		raise ValueError("sequence length must be >= 0")
	rng = rng or random.Random()
	order = list(range(1, n + 1))
	for i in range(n - 1, 0, -1):
		j = rng.randint(0, i)
		order[i], order[j] = order[j], order[i]
	return order


def load_sequence(order: Sequence[int], loader: ReferenceLoader) -> List[ReferencePose]:
	"""
	Load every pose in `order`, one after another. Loader errors propagate, so
	the caller never sees a partial sequence.
	"""
	poses: List[ReferencePose] = []
	for pose_id in order:
		keypoints = loader.load_keypoints(pose_id)
		image = loader.resolve_image(pose_id)
		poses.append(ReferencePose(id=int(pose_id), keypoints=keypoints, image=image))
	logger.debug("Loaded %d reference poses: %s", len(poses), list(order))
	return poses


def current(sequence: Sequence[ReferencePose], index: int) -> Optional[ReferencePose]:
	if index < 0 or index >= len(sequence):
		return None
	return sequence[index]
