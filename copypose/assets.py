"""Reference pose files: keypoint JSON plus an illustrative image per pose id."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

from copypose.pose.types import KeypointSet

logger = logging.getLogger(__name__)


class PoseAssetError(Exception):
	"""Base class for reference data that cannot be used."""


class PoseAssetNotFound(PoseAssetError):
	pass


class PoseAssetParseError(PoseAssetError):
	pass


class FileReferenceLoader:
	"""
	Loads reference poses from a directory.

	Expected layout (names are configurable, `{id}` is the pose id):
	  <poses_dir>/pose{id}.json   -> {"keypoints": [...]} or a bare list
	  <poses_dir>/pose{id}.png    -> illustration; pose{id}.PNG is tried next
	"""

	def __init__(
		self,
		poses_dir: str | Path,
		keypoints_name: str = "pose{id}.json",
		image_name: str = "pose{id}",
		image_suffixes: Sequence[str] = (".png", ".PNG"),
	) -> None:
		self.poses_dir = Path(poses_dir)
		self.keypoints_name = keypoints_name
		self.image_name = image_name
		self.image_suffixes = tuple(image_suffixes)

	@classmethod
	def from_config(cls, cfg) -> "FileReferenceLoader":
		return cls(
			poses_dir=cfg.assets.poses_dir,
			keypoints_name=cfg.assets.keypoints_name,
			image_name=cfg.assets.image_name,
			image_suffixes=cfg.assets.image_suffixes,
		)

	def load_keypoints(self, pose_id: int) -> KeypointSet:
		path = self.poses_dir / self.keypoints_name.format(id=int(pose_id))
		try:
			text = path.read_text(encoding="utf-8")
		except FileNotFoundError as e:
			raise PoseAssetNotFound(f"Reference pose {pose_id} not found: {path}") from e
		except OSError as e:
			raise PoseAssetNotFound(f"Reference pose {pose_id} unreadable: {path} ({e})") from e
		try:
			return KeypointSet.from_json(json.loads(text))
		except ValueError as e:
			# json.JSONDecodeError is a ValueError too.
			raise PoseAssetParseError(f"Reference pose {pose_id} is malformed: {path} ({e})") from e

	def resolve_image(self, pose_id: int) -> Path:
		base = self.image_name.format(id=int(pose_id))
		for suffix in self.image_suffixes:
			candidate = self.poses_dir / f"{base}{suffix}"
			if candidate.is_file():
				return candidate
			logger.debug("Image %s missing, trying next suffix", candidate)
		raise PoseAssetNotFound(f"No image for reference pose {pose_id} in {self.poses_dir}")
