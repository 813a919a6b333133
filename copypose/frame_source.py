from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Dict, Optional

import numpy as np
from PIL import Image, UnidentifiedImageError


@dataclass(frozen=True)
class Frame:
	seq: int
	rgb: Any  # HxWx3 uint8 numpy array
	t_host: float


class PushedFrameSource:
	"""
	Holds the latest frame pushed by a client.

	The camera lives on the client side (browser or kiosk script); it posts
	JPEG frames and the game loop only ever looks at the newest one. Thread-safe.
	"""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self._latest: Optional[Frame] = None
		self._seq: int = 0
		self._rejected: int = 0

	def name(self) -> str:
		return "pushed"

	def push_jpeg(self, data: bytes) -> Frame:
		"""Decode a JPEG (or any Pillow-readable image) and make it the latest frame."""
		if not data:
			with self._lock:
				self._rejected += 1
			raise ValueError("empty frame")
		try:
			with Image.open(BytesIO(data)) as im:
				rgb = np.asarray(im.convert("RGB"), dtype=np.uint8)
		except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
			with self._lock:
				self._rejected += 1
			raise ValueError(f"undecodable frame: {e}") from e
		return self.push_rgb(rgb)

	def push_rgb(self, rgb) -> Frame:
		with self._lock:
			self._seq += 1
			frame = Frame(seq=self._seq, rgb=rgb, t_host=time.time())
			self._latest = frame
		return frame

	def latest(self) -> Optional[Frame]:
		with self._lock:
			return self._latest

	def get_status(self) -> Dict[str, Any]:
		with self._lock:
			f = self._latest
			return {
				"source": self.name(),
				"frames": self._seq,
				"rejected": self._rejected,
				"last_t_host": f.t_host if f else None,
				"width": int(f.rgb.shape[1]) if f is not None else None,
				"height": int(f.rgb.shape[0]) if f is not None else None,
			}
