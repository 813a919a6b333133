"""Game routes. Routes: /game/start, /game/restart, /game/skip, /game/stop, /game/status, /game/images/{pose_id}."""
import asyncio
import logging
import random
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from app_state import AppState
from copypose.game.controller import GameController
from copypose.pose.base import EstimatorUnavailable
from deps import get_controller, get_state
from schemas.requests import GameStartPayload
from schemas.responses import GameActionResponse, GameStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["game"])


async def _broadcast(state: AppState, message: Dict[str, Any]) -> None:
	if state.manager is not None:
		await state.manager.broadcast_json(message)


async def _ensure_estimator(state: AppState) -> None:
	"""Acquire the pose estimator once. 503 (game untouched) if it is unavailable."""
	if state.estimator is not None:
		return
	try:
		state.estimator = await asyncio.get_running_loop().run_in_executor(None, state.estimator_factory)
	except EstimatorUnavailable as e:
		logger.error("Pose estimator unavailable: %s", e)
		raise HTTPException(status_code=503, detail=f"Pose estimator not available: {e}") from e
	state.loop.estimator = state.estimator


async def _start_game(state: AppState, payload: Optional[GameStartPayload]) -> Dict[str, Any]:
	await _ensure_estimator(state)
	controller = state.controller
	# A seed only takes over the random source once the new sequence has loaded.
	rng = random.Random(payload.seed) if payload is not None and payload.seed is not None else None
	async with state.game_lock:
		ok = await asyncio.get_running_loop().run_in_executor(None, controller.restart, rng)
		snap = controller.snapshot()
	if not ok:
		await _broadcast(state, {"type": "error", "msg": controller.error_message})
		raise HTTPException(status_code=500, detail=controller.error_message or "Game could not be started")

	state.loop.start()
	await _broadcast(state, {"type": "game_event", "event": "started", "index": 0})
	await _broadcast(state, {"type": "game", **snap})
	return snap


@router.post("/game/start", response_model=GameActionResponse)
async def game_start(payload: Optional[GameStartPayload] = None, state: AppState = Depends(get_state)):
	"""Shuffle and load a new pose sequence and start ticking."""
	snap = await _start_game(state, payload)
	return {"detail": "Game started.", "game": snap}


@router.post("/game/restart", response_model=GameActionResponse)
async def game_restart(payload: Optional[GameStartPayload] = None, state: AppState = Depends(get_state)):
	"""Same as start; allowed in any phase, including after completion."""
	snap = await _start_game(state, payload)
	return {"detail": "Game restarted.", "game": snap}


@router.post("/game/skip", response_model=GameActionResponse)
async def game_skip(state: AppState = Depends(get_state)):
	"""Advance to the next pose without matching it."""
	controller = state.controller
	async with state.game_lock:
		ok = controller.skip()
		snap = controller.snapshot()
	if not ok:
		raise HTTPException(status_code=409, detail="No game is running")
	await _broadcast(state, {"type": "game_event", "event": "skipped", "index": snap["index"]})
	if snap["phase"] == "completed":
		await _broadcast(state, {"type": "game_event", "event": "completed", "index": snap["index"]})
	await _broadcast(state, {"type": "game", **snap})
	return {"detail": "Pose skipped.", "game": snap}


@router.post("/game/stop", response_model=GameActionResponse)
async def game_stop(state: AppState = Depends(get_state)):
	"""Stop the tick loop. The game keeps its state and resumes on start/restart."""
	await state.loop.stop()
	return {"detail": "Game loop stopped.", "game": state.controller.snapshot()}


@router.get("/game/status", response_model=GameStatusResponse)
async def game_status(state: AppState = Depends(get_state)):
	async with state.game_lock:
		snap = state.controller.snapshot()
	return {"game": snap, "loop": state.loop.get_status()}


@router.get("/game/images/{pose_id}")
async def game_image(pose_id: int, controller: GameController = Depends(get_controller)):
	"""Illustration for a pose of the current sequence."""
	for ref in controller.sequence:
		if ref.id == pose_id and isinstance(ref.image, Path):
			return FileResponse(ref.image)
	raise HTTPException(status_code=404, detail=f"No image for pose {pose_id}")
