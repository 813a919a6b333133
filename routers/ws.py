"""Presentation sink. Route: /ws. Clients receive game snapshots, game events, errors and log lines."""
import asyncio
import json
import logging
from typing import Any, Dict, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ws"])


def _encode(message: Dict[str, Any]) -> str:
	return json.dumps(message, separators=(",", ":"))


class ConnectionManager:
	"""Fan-out of JSON messages to every connected /ws client. Clients that fail a send are dropped."""

	def __init__(self) -> None:
		self._clients: Set[WebSocket] = set()
		self._lock = asyncio.Lock()

	@property
	def client_count(self) -> int:
		return len(self._clients)

	async def connect(self, websocket: WebSocket) -> None:
		await websocket.accept()
		async with self._lock:
			self._clients.add(websocket)
		logger.debug("WebSocket client connected (%d total)", len(self._clients))

	async def disconnect(self, websocket: WebSocket) -> None:
		async with self._lock:
			self._clients.discard(websocket)

	async def send_json(self, websocket: WebSocket, message: Dict[str, Any]) -> None:
		await websocket.send_text(_encode(message))

	async def broadcast_json(self, message: Dict[str, Any]) -> None:
		payload = _encode(message)
		async with self._lock:
			clients = list(self._clients)
			if not clients:
				return
			results = await asyncio.gather(*(self._send(ws, payload) for ws in clients))
			for ws, ok in zip(clients, results):
				if not ok:
					self._clients.discard(ws)

	@staticmethod
	async def _send(ws: WebSocket, payload: str) -> bool:
		try:
			await ws.send_text(payload)
			return True
		except Exception as e:
			logger.debug("WebSocket send failed (%r); dropping client", e)
		try:
			await ws.close()
		except RuntimeError:
			pass
		return False


@router.websocket("/ws")
async def ws_endpoint(websocket: WebSocket):
	state = websocket.app.state.state
	manager: ConnectionManager = state.manager
	await manager.connect(websocket)
	try:
		# A fresh client renders from this; later updates arrive via broadcast_json.
		if state.controller is not None:
			await manager.send_json(websocket, {"type": "game", **state.controller.snapshot()})
		while True:
			# Inbound messages carry no commands; reading keeps disconnects visible.
			await websocket.receive_text()
	except WebSocketDisconnect:
		pass
	finally:
		await manager.disconnect(websocket)
