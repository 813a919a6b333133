"""
Explicit app state: the one place a running game service keeps its objects.
Created in create_app(), attached to app.state.state; injected into routes via Depends(get_state).
"""
from typing import Any, Callable, Optional

from copypose.config import AppConfig
from copypose.frame_source import PushedFrameSource
from copypose.game.controller import GameController
from copypose.game.loop import GameLoop


class AppState:
	"""
	Holds all runtime state for one game service. Nothing lives in module globals,
	so several apps (e.g. in tests) can run side by side.
	"""
	cfg: Optional[AppConfig] = None

	# WebSocket presentation sink (routers.ws.ConnectionManager)
	manager: Any = None

	# Game session
	controller: Optional[GameController] = None
	loop: Optional[GameLoop] = None
	# Held by start/restart/skip and by each tick.
	game_lock: Any = None

	# Collaborators
	frames: Optional[PushedFrameSource] = None
	estimator: Any = None
	estimator_factory: Optional[Callable[[], Any]] = None

	# Helpers (set in server after creation)
	log_to_clients: Any = None

	def __init__(self) -> None:
		self.estimator = None
