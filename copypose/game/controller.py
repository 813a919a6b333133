from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from copypose.assets import PoseAssetError
from copypose.config import GameConfig
from copypose.game.hold import HoldConfirmation, HoldUpdate
from copypose.game.sequence import ReferenceLoader, ReferencePose, build_sequence, current, load_sequence
from copypose.pose.similarity import SimilarityResult, score_pose
from copypose.pose.types import KeypointSet

logger = logging.getLogger(__name__)


class GamePhase(str, enum.Enum):
	NOT_STARTED = "not_started"
	RUNNING = "running"
	COMPLETED = "completed"


@dataclass(frozen=True)
class TickOutcome:
	similarity: Optional[SimilarityResult] = None
	hold: Optional[HoldUpdate] = None
	advanced: bool = False
	completed: bool = False


_IDLE_TICK = TickOutcome()


class GameController:
	"""
	Owns one game session: the shuffled reference sequence, the current index
	and the hold-confirmation state.

	Lifecycle:
	  NOT_STARTED --start()--> RUNNING --advance()/skip() x N--> COMPLETED
	  restart() is allowed from any phase and reshuffles.

	Frames are fed through tick(); the caller decides when ticks happen and
	must not tick while start()/restart() is loading.
	"""

	def __init__(
		self,
		loader: ReferenceLoader,
		config: Optional[GameConfig] = None,
		rng: Optional[random.Random] = None,
		clock: Optional[Callable[[], float]] = None,
	) -> None:
		self.config = config or GameConfig()
		self._loader = loader
		self._rng = rng or random.Random(self.config.seed)
		self._hold = HoldConfirmation(
			mode=self.config.confirm_mode,
			hold_ms=self.config.hold_ms,
			hold_frames=self.config.hold_frames,
			clock=clock,
		)

		self.phase: GamePhase = GamePhase.NOT_STARTED
		self.index: int = 0
		self.order: List[int] = []
		self.sequence: List[ReferencePose] = []
		self.error_message: Optional[str] = None
		self.confirmed_count: int = 0
		self.skipped_count: int = 0
		self.last_similarity: Optional[SimilarityResult] = None
		# Bumped by every successful start(); lets callers drop work begun for an older session.
		self.generation: int = 0

	@property
	def total(self) -> int:
		return int(self.config.total_poses)

	@property
	def hold(self) -> HoldConfirmation:
		return self._hold

	def current(self) -> Optional[ReferencePose]:
		if self.phase != GamePhase.RUNNING:
			return None
		return current(self.sequence, self.index)

	def start(self, rng: Optional[random.Random] = None) -> bool:
		"""
		Shuffle and load a fresh sequence, then run from index 0.

		`rng` replaces the random source, but only if the load succeeds.
		Returns False (state untouched, error_message set) when the reference
		data cannot be loaded.
		"""
		order = build_sequence(self.total, rng or self._rng)
		try:
			sequence = load_sequence(order, self._loader)
		except PoseAssetError as e:
			logger.warning("Game start aborted: %s", e)
			self.error_message = f"Could not load the reference poses: {e}"
			return False

		if rng is not None:
			self._rng = rng
		self.generation += 1
		self.order = order
		self.sequence = sequence
		self.index = 0
		self.confirmed_count = 0
		self.skipped_count = 0
		self.last_similarity = None
		self.error_message = None
		self._hold.reset()
		self.phase = GamePhase.RUNNING if sequence else GamePhase.COMPLETED
		logger.info("Game started, pose order %s", order)
		return True

	def restart(self, rng: Optional[random.Random] = None) -> bool:
		return self.start(rng)

	def reseed(self, seed: Optional[int]) -> None:
		"""Use a new random source for the following start/restart."""
		self._rng = random.Random(seed)

	def tick(self, live: Optional[KeypointSet]) -> TickOutcome:
		if self.phase != GamePhase.RUNNING:
			return _IDLE_TICK
		# No detection this frame: keep whatever evidence we have.
		if live is None:
			return _IDLE_TICK
		ref = self.current()
		if ref is None:
			return _IDLE_TICK

		sim = score_pose(
			live,
			ref.keypoints,
			min_score=self.config.min_keypoint_score,
			match_threshold_deg=self.config.match_threshold_deg,
		)
		self.last_similarity = sim
		upd = self._hold.update(sim.matched)
		logger.debug(
			"pose %d: diff=%s joints=%d matched=%s hold=%s %.2f",
			ref.id,
			"n/a" if sim.mean_angle_diff is None else f"{sim.mean_angle_diff:.1f}",
			sim.considered_joints,
			sim.matched,
			upd.phase.value,
			upd.progress,
		)
		if not upd.confirmed:
			return TickOutcome(similarity=sim, hold=upd)

		self.confirmed_count += 1
		logger.info("Pose %d confirmed (%d/%d)", ref.id, self.index + 1, self.total)
		completed = self.advance()
		return TickOutcome(similarity=sim, hold=upd, advanced=True, completed=completed)

	def advance(self) -> bool:
		"""
		Move to the next reference pose. Returns True when that finished the game.
		"""
		if self.phase != GamePhase.RUNNING:
			return False
		self.index += 1
		self._hold.reset()
		self.last_similarity = None
		if self.index >= len(self.sequence):
			self.index = len(self.sequence)
			self.phase = GamePhase.COMPLETED
			logger.info("Game completed: %d confirmed, %d skipped", self.confirmed_count, self.skipped_count)
			return True
		return False

	def skip(self) -> bool:
		"""
		Manual override: advance regardless of the match state.
		Returns False when no game is running.
		"""
		if self.phase != GamePhase.RUNNING:
			return False
		ref = self.current()
		self.skipped_count += 1
		logger.info("Pose %s skipped", ref.id if ref else "?")
		self.advance()
		return True

	def snapshot(self) -> Dict[str, Any]:
		ref = self.current()
		sim = self.last_similarity
		return {
			"phase": self.phase.value,
			"index": self.index,
			"total": self.total,
			"order": list(self.order),
			"current_pose_id": ref.id if ref else None,
			"current_image": _image_name(ref.image) if ref else None,
			"progress": self._hold.progress,
			"hold_phase": self._hold.phase.value,
			"matched": sim.matched if sim else None,
			"mean_angle_diff": sim.mean_angle_diff if sim else None,
			"considered_joints": sim.considered_joints if sim else 0,
			"confirmed_count": self.confirmed_count,
			"skipped_count": self.skipped_count,
			"error": self.error_message,
		}


def _image_name(image: Any) -> Optional[str]:
	if image is None:
		return None
	name = getattr(image, "name", None)
	return str(name) if name else str(image)
