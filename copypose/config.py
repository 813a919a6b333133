from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

CONFIRM_MODES = ("time", "count", "instant")


@dataclass(frozen=True)
class GameConfig:
	# Number of reference poses in one session (ids 1..total_poses).
	total_poses: int = 7
	# Mean joint-angle difference (degrees) below which a frame counts as a match.
	match_threshold_deg: float = 45.0
	# Keypoints at or below this confidence are left out of the comparison.
	min_keypoint_score: float = 0.4
	# "time" (hold_ms), "count" (hold_frames consecutive matches) or "instant".
	confirm_mode: str = "time"
	hold_ms: float = 3000.0
	hold_frames: int = 50
	# Fixed seed for the pose order; None shuffles differently every session.
	seed: Optional[int] = None


@dataclass(frozen=True)
class AssetsConfig:
	# Expected layout:
	#   <poses_dir>/
	#     pose1.json
	#     pose1.png   (or pose1.PNG)
	#     ...
	poses_dir: str = "poses"
	keypoints_name: str = "pose{id}.json"
	image_name: str = "pose{id}"
	image_suffixes: Tuple[str, ...] = (".png", ".PNG")


@dataclass(frozen=True)
class PoseConfig:
	provider: str = "mediapipe"
	model_complexity: int = 1
	min_detection_confidence: float = 0.5
	min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class LoopConfig:
	# Upper bound on pose estimates per second.
	fps: float = 15.0


@dataclass(frozen=True)
class ServerConfig:
	host: str = "0.0.0.0"
	port: int = 8000


@dataclass(frozen=True)
class AppConfig:
	game: GameConfig = field(default_factory=GameConfig)
	assets: AssetsConfig = field(default_factory=AssetsConfig)
	pose: PoseConfig = field(default_factory=PoseConfig)
	loop: LoopConfig = field(default_factory=LoopConfig)
	server: ServerConfig = field(default_factory=ServerConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None


def _repo_root() -> Path:
	# copypose/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
	env = os.getenv("COPYPOSE_CONFIG")
	if env:
		return Path(env).expanduser().resolve()
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path (must be called before first get_config()).
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
	try:
		return int(v)
	except (TypeError, ValueError):
		return int(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except (TypeError, ValueError):
		return float(default)


def _as_suffixes(v: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
	if not isinstance(v, list):
		return default
	out = tuple(str(s) for s in v if isinstance(s, str) and s)
	return out or default


def _parse_game(raw: Dict[str, Any]) -> GameConfig:
	d = GameConfig()
	total = _as_int(_deep_get(raw, ["game", "total_poses"], d.total_poses), d.total_poses)
	threshold = _as_float(_deep_get(raw, ["game", "match_threshold_deg"], d.match_threshold_deg), d.match_threshold_deg)
	min_score = _as_float(_deep_get(raw, ["game", "min_keypoint_score"], d.min_keypoint_score), d.min_keypoint_score)
	mode = _as_str(_deep_get(raw, ["game", "confirm_mode"], d.confirm_mode), d.confirm_mode).strip().lower()
	hold_ms = _as_float(_deep_get(raw, ["game", "hold_ms"], d.hold_ms), d.hold_ms)
	hold_frames = _as_int(_deep_get(raw, ["game", "hold_frames"], d.hold_frames), d.hold_frames)
	seed_raw = _deep_get(raw, ["game", "seed"], None)
	seed = _as_int(seed_raw, 0) if seed_raw is not None else None

	return GameConfig(
		total_poses=total if total > 0 else d.total_poses,
		match_threshold_deg=threshold if 0.0 < threshold <= 180.0 else d.match_threshold_deg,
		min_keypoint_score=min_score if 0.0 <= min_score < 1.0 else d.min_keypoint_score,
		confirm_mode=mode if mode in CONFIRM_MODES else d.confirm_mode,
		hold_ms=hold_ms if hold_ms > 0.0 else d.hold_ms,
		hold_frames=hold_frames if hold_frames > 0 else d.hold_frames,
		seed=seed,
	)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except (OSError, ValueError) as e:
		logger.warning("Config %s unreadable (%r); using defaults.", p, e)
		return AppConfig()

	if not isinstance(raw, dict):
		logger.warning("Config %s is not a JSON object; using defaults.", p)
		return AppConfig()

	a = AssetsConfig()
	poses_dir = _as_str(_deep_get(raw, ["assets", "poses_dir"], a.poses_dir), a.poses_dir).strip()
	keypoints_name = _as_str(_deep_get(raw, ["assets", "keypoints_name"], a.keypoints_name), a.keypoints_name)
	image_name = _as_str(_deep_get(raw, ["assets", "image_name"], a.image_name), a.image_name)
	suffixes = _as_suffixes(_deep_get(raw, ["assets", "image_suffixes"], None), a.image_suffixes)

	pc = PoseConfig()
	provider = _as_str(_deep_get(raw, ["pose", "provider"], pc.provider), pc.provider).strip().lower()
	complexity = _as_int(_deep_get(raw, ["pose", "model_complexity"], pc.model_complexity), pc.model_complexity)
	det_conf = _as_float(_deep_get(raw, ["pose", "min_detection_confidence"], pc.min_detection_confidence), pc.min_detection_confidence)
	trk_conf = _as_float(_deep_get(raw, ["pose", "min_tracking_confidence"], pc.min_tracking_confidence), pc.min_tracking_confidence)

	fps = _as_float(_deep_get(raw, ["loop", "fps"], 15.0), 15.0)

	host = _as_str(_deep_get(raw, ["server", "host"], "0.0.0.0"), "0.0.0.0").strip()
	port = _as_int(_deep_get(raw, ["server", "port"], 8000), 8000)

	return AppConfig(
		game=_parse_game(raw),
		assets=AssetsConfig(
			poses_dir=poses_dir or a.poses_dir,
			keypoints_name=keypoints_name if "{id}" in keypoints_name else a.keypoints_name,
			image_name=image_name if "{id}" in image_name else a.image_name,
			image_suffixes=suffixes,
		),
		pose=PoseConfig(
			provider=provider or pc.provider,
			model_complexity=complexity if complexity in (0, 1, 2) else pc.model_complexity,
			min_detection_confidence=det_conf,
			min_tracking_confidence=trk_conf,
		),
		loop=LoopConfig(fps=fps if fps > 0.0 else 15.0),
		server=ServerConfig(host=host or "0.0.0.0", port=port if port > 0 else 8000),
	)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
