import argparse
import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from copypose import __version__
from copypose.assets import FileReferenceLoader
from copypose.config import AppConfig, get_config, set_config_path
from copypose.frame_source import PushedFrameSource
from copypose.game.controller import GameController
from copypose.game.loop import GameLoop
from copypose.pose.base import get_pose_provider
from routers import game, video, ws

logger = logging.getLogger(__name__)


def _make_log_to_clients(state: AppState) -> Callable[[str], None]:
	def _log_to_clients(message: str) -> None:
		"""
		Send a log line to all connected WebSocket clients.
		Fire-and-forget; safe to call from non-async code.
		"""
		try:
			asyncio.get_running_loop()
		except RuntimeError:
			# No running loop yet; ignore
			return
		asyncio.ensure_future(state.manager.broadcast_json({"type": "log", "msg": message}))

	return _log_to_clients


class _ClientLogHandler(logging.Handler):
	"""Forwards INFO+ lines from the copypose package to WebSocket clients."""

	def __init__(self, sink: Callable[[str], None]) -> None:
		super().__init__(level=logging.INFO)
		self._sink = sink

	def emit(self, record: logging.LogRecord) -> None:
		try:
			self._sink(self.format(record))
		except Exception:
			self.handleError(record)


def create_app(
	cfg: Optional[AppConfig] = None,
	loader: Any = None,
	estimator_factory: Optional[Callable[[], Any]] = None,
	rng: Optional[random.Random] = None,
	clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
	"""
	Build a FastAPI app with its own AppState. Collaborators default to the
	file loader and the configured pose provider; tests pass fakes.
	"""
	cfg = cfg or get_config()
	state = AppState()
	state.cfg = cfg
	state.manager = ws.ConnectionManager()
	state.frames = PushedFrameSource()
	state.estimator_factory = estimator_factory or (lambda: get_pose_provider(cfg))
	state.controller = GameController(
		loader=loader or FileReferenceLoader.from_config(cfg),
		config=cfg.game,
		rng=rng,
		clock=clock,
	)
	state.log_to_clients = _make_log_to_clients(state)

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		state.game_lock = asyncio.Lock()
		state.loop = GameLoop(
			controller=state.controller,
			estimator=state.estimator,
			frames=state.frames,
			lock=state.game_lock,
			publish=state.manager.broadcast_json,
			fps=cfg.loop.fps,
		)
		handler = _ClientLogHandler(state.log_to_clients)
		handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))
		pkg_logger = logging.getLogger("copypose")
		pkg_logger.addHandler(handler)
		try:
			yield
		finally:
			pkg_logger.removeHandler(handler)
			await state.loop.stop()
			if state.estimator is not None:
				try:
					state.estimator.close()
				except Exception as e:
					logger.warning("Estimator close failed: %r", e)
				state.estimator = None

	app = FastAPI(title="copypose", version=__version__, lifespan=lifespan)
	app.state.state = state
	app.add_middleware(
		CORSMiddleware,
		allow_origins=["*"],
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(game.router)
	app.include_router(video.router)
	app.include_router(ws.router)
	return app


app = create_app()


def main() -> None:
	parser = argparse.ArgumentParser(description="Copy-the-pose game server.")
	parser.add_argument("--config", help="Path to config.json (default: repo root or $COPYPOSE_CONFIG).")
	parser.add_argument("--host", help="Bind address (overrides config).")
	parser.add_argument("--port", type=int, help="Port (overrides config).")
	parser.add_argument("--log-level", default="INFO", help="Logging level, e.g. DEBUG.")
	args = parser.parse_args()

	logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO), format="%(levelname)s:%(name)s:%(message)s")
	if args.config:
		set_config_path(args.config)
	cfg = get_config()

	import uvicorn

	uvicorn.run(create_app(cfg), host=args.host or cfg.server.host, port=int(args.port or cfg.server.port))


if __name__ == "__main__":
	main()
