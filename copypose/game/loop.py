from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from copypose.game.controller import GameController, GamePhase

logger = logging.getLogger(__name__)

Publisher = Callable[[Dict[str, Any]], Awaitable[None]]


async def _no_publish(_msg: Dict[str, Any]) -> None:
	return None


class GameLoop:
	"""
	Per-frame scheduler for a GameController.

	One asyncio task pulls the newest frame, runs the estimator in a worker
	thread, then ticks the controller while holding `lock` (the same lock that
	start/restart hold while loading, so a tick never overlaps a load). Every
	tick publishes a {"type": "game"} snapshot; confirmations publish
	{"type": "game_event"} messages.

	The task ends by itself once the controller leaves RUNNING. An estimator
	exception ends it too: the error is logged, kept in `last_error` and
	published as {"type": "error"}.
	"""

	def __init__(
		self,
		controller: GameController,
		estimator,
		frames,
		lock: Optional[asyncio.Lock] = None,
		publish: Optional[Publisher] = None,
		fps: float = 15.0,
	) -> None:
		self.controller = controller
		self.estimator = estimator
		self.frames = frames
		self.lock = lock or asyncio.Lock()
		self._publish: Publisher = publish or _no_publish
		self.fps = float(fps) if fps > 0 else 15.0
		self._task: Optional[asyncio.Task] = None
		self.last_error: Optional[str] = None
		self.ticks: int = 0

	@property
	def running(self) -> bool:
		return self._task is not None and not self._task.done()

	def get_status(self) -> Dict[str, Any]:
		return {
			"running": self.running,
			"fps": self.fps,
			"ticks": self.ticks,
			"error": self.last_error,
		}

	def start(self) -> bool:
		"""Start the tick task. Returns False if one is already running."""
		if self.running:
			return False
		self.last_error = None
		self._task = asyncio.create_task(self.run())
		self._task.add_done_callback(self._on_done)
		return True

	async def stop(self) -> None:
		"""Cancel the tick task; safe to call any number of times."""
		task = self._task
		self._task = None
		if task is None or task.done():
			return
		task.cancel()
		try:
			await task
		except asyncio.CancelledError:
			pass

	async def run(self) -> None:
		interval = 1.0 / self.fps
		last_seq: Optional[int] = None
		while self.controller.phase == GamePhase.RUNNING:
			frame = self.frames.latest()
			if frame is None or frame.seq == last_seq:
				await asyncio.sleep(interval)
				continue
			last_seq = frame.seq
			t0 = time.monotonic()
			generation = self.controller.generation

			poses = await asyncio.get_running_loop().run_in_executor(None, self.estimator.estimate, frame.rgb)

			async with self.lock:
				stale = self.controller.generation != generation
				if not stale:
					outcome = self.controller.tick(poses[0] if poses else None)
					snap = self.controller.snapshot()
			if stale:
				# The game was restarted while this frame was being estimated.
				logger.debug("Dropping estimate from before the restart (frame %d)", frame.seq)
				last_seq = None
				continue
			self.ticks += 1

			await self._publish({"type": "game", **snap})
			if outcome.advanced:
				await self._publish({"type": "game_event", "event": "advanced", "index": snap["index"]})
			if outcome.completed:
				await self._publish({"type": "game_event", "event": "completed", "index": snap["index"]})

			await asyncio.sleep(max(0.0, interval - (time.monotonic() - t0)))

	def _on_done(self, task: asyncio.Task) -> None:
		if task.cancelled():
			return
		exc = task.exception()
		if exc is None:
			logger.info("Game loop finished after %d ticks", self.ticks)
			return
		self.last_error = f"Pose estimation failed: {exc!r}"
		logger.error("Game loop stopped: %s", self.last_error, exc_info=exc)
		asyncio.ensure_future(self._publish({"type": "error", "msg": self.last_error}))
