from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from copypose.pose.types import KeypointSet


class EstimatorUnavailable(RuntimeError):
	"""Raised when the pose model (or the library behind it) cannot be acquired."""


class PoseProvider(ABC):
	"""
	Model adapter interface.

	Implementations take an RGB image (H,W,3 uint8) and return one KeypointSet
	per detected person. An empty list means nobody was detected; that is a
	valid result, not an error.
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def estimate(self, rgb) -> List[KeypointSet]: ...

	@abstractmethod
	def close(self) -> None: ...


def get_pose_provider(cfg=None) -> PoseProvider:
	"""
	Build the configured estimator. Raises EstimatorUnavailable when the
	backend cannot be created.
	"""
	from copypose.config import get_config

	cfg = cfg or get_config()
	provider = (cfg.pose.provider or "mediapipe").strip().lower()
	if provider in ("mediapipe", "mp"):
		from copypose.pose.mediapipe_provider import MediaPipePoseProvider

		return MediaPipePoseProvider(
			model_complexity=cfg.pose.model_complexity,
			min_detection_confidence=cfg.pose.min_detection_confidence,
			min_tracking_confidence=cfg.pose.min_tracking_confidence,
		)
	raise EstimatorUnavailable(f"Unknown pose provider: {provider!r}")
