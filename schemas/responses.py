"""Pydantic response models for API docs (routes return plain dicts shaped like these)."""
from typing import List, Optional

from pydantic import BaseModel


class GameSnapshot(BaseModel):
	"""Presentation view of one game session."""

	phase: str
	index: int
	total: int
	order: List[int] = []
	current_pose_id: Optional[int] = None
	current_image: Optional[str] = None
	progress: float = 0.0
	hold_phase: str = "idle"
	matched: Optional[bool] = None
	mean_angle_diff: Optional[float] = None
	considered_joints: int = 0
	confirmed_count: int = 0
	skipped_count: int = 0
	error: Optional[str] = None


class LoopStatus(BaseModel):
	running: bool
	fps: float
	ticks: int
	error: Optional[str] = None


class GameStatusResponse(BaseModel):
	"""Response from GET /game/status."""

	game: GameSnapshot
	loop: LoopStatus


class GameActionResponse(BaseModel):
	"""Response from POST /game/start, /game/restart, /game/skip and /game/stop."""

	detail: str
	game: GameSnapshot
