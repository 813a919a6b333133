from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Keypoint:
	"""
	A single named 2D keypoint.
	"""

	name: str
	x: float
	y: float
	score: float  # detection confidence [0..1]


@dataclass(frozen=True)
class KeypointSet:
	"""
	One full-body pose snapshot, either live (from the estimator) or reference
	(loaded from disk).

	- Keypoints keep their input order and are unique by name.
	- width/height describe the source image when known; scoring does not need them.
	"""

	keypoints: Tuple[Keypoint, ...] = ()
	width: Optional[int] = None
	height: Optional[int] = None
	_by_name: Dict[str, Keypoint] = field(default_factory=dict, init=False, repr=False, compare=False)

	def __post_init__(self) -> None:
		kps = tuple(self.keypoints)
		index: Dict[str, Keypoint] = {}
		for kp in kps:
			if kp.name in index:
				raise ValueError(f"duplicate keypoint name: {kp.name!r}")
			index[kp.name] = kp
		object.__setattr__(self, "keypoints", kps)
		object.__setattr__(self, "_by_name", index)

	def get(self, name: str) -> Optional[Keypoint]:
		return self._by_name.get(name)

	def names(self) -> List[str]:
		return [kp.name for kp in self.keypoints]

	def __iter__(self) -> Iterator[Keypoint]:
		return iter(self.keypoints)

	def __len__(self) -> int:
		return len(self.keypoints)

	@classmethod
	def from_json(cls, obj: Any) -> "KeypointSet":
		"""
		Build a KeypointSet from decoded JSON.

		Accepts either {"keypoints": [...]} or a bare list of
		{"name", "x", "y", "score"} objects. A missing score reads as 0.0, which
		keeps that joint out of any comparison.
		"""
		if isinstance(obj, dict):
			items = obj.get("keypoints")
		else:
			items = obj
		if not isinstance(items, (list, tuple)):
			raise ValueError("expected a list of keypoints")
		return cls(keypoints=tuple(_parse_keypoint(i, item) for i, item in enumerate(items)))

	def to_json(self) -> List[Dict[str, Any]]:
		return [{"name": kp.name, "x": kp.x, "y": kp.y, "score": kp.score} for kp in self.keypoints]


def _parse_keypoint(i: int, item: Any) -> Keypoint:
	if not isinstance(item, dict):
		raise ValueError(f"keypoint #{i} is not an object")
	name = item.get("name")
	if not isinstance(name, str) or not name:
		raise ValueError(f"keypoint #{i} has no name")
	try:
		x = float(item["x"])
		y = float(item["y"])
	except (KeyError, TypeError, ValueError) as e:
		raise ValueError(f"keypoint {name!r} has invalid coordinates") from e
	try:
		score = float(item.get("score", 0.0) or 0.0)
	except (TypeError, ValueError):
		score = 0.0
	return Keypoint(name=name, x=x, y=y, score=score)


def keypoint_set(points: Sequence[Tuple[str, float, float, float]]) -> KeypointSet:
	"""Shorthand for building a set from (name, x, y, score) tuples."""
	return KeypointSet(keypoints=tuple(Keypoint(name=n, x=float(x), y=float(y), score=float(s)) for n, x, y, s in points))
