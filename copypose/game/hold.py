from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional


def _monotonic_ms() -> float:
	return time.monotonic() * 1000.0


class HoldPhase(str, enum.Enum):
	IDLE = "idle"
	HOLDING = "holding"
	CONFIRMED = "confirmed"


@dataclass(frozen=True)
class HoldUpdate:
	phase: HoldPhase
	progress: float  # 0..1, for the progress bar
	evidence: float  # ms held ("time") or consecutive matches ("count"/"instant")
	confirmed: bool  # True only on the update that reached the threshold


class HoldConfirmation:
	"""
	Turns per-frame match signals into a "held long enough" event.

	Modes:
	  - "time":    confirmed once matches have been continuous for hold_ms.
	  - "count":   confirmed after hold_frames consecutive matching frames.
	  - "instant": the first matching frame confirms.

	A single non-matching frame drops all accumulated evidence; there is no
	decay or grace period. After a confirmation the machine is back at IDLE
	with zero evidence.
	"""

	def __init__(
		self,
		mode: str = "time",
		hold_ms: float = 3000.0,
		hold_frames: int = 50,
		clock: Optional[Callable[[], float]] = None,
	) -> None:
		mode = (mode or "").strip().lower()
		if mode not in ("time", "count", "instant"):
			raise ValueError(f"unknown confirm mode: {mode!r}")
		if mode == "time" and not float(hold_ms) >= 0.0:
			raise ValueError("hold_ms must be >= 0")
		if mode == "count" and int(hold_frames) < 1:
			raise ValueError("hold_frames must be >= 1")
		self.mode = mode
		self.hold_ms = float(hold_ms)
		self.hold_frames = int(hold_frames) if mode == "count" else 1
		self._clock: Callable[[], float] = clock or _monotonic_ms

		self._start_ms: Optional[float] = None
		self._count: int = 0
		self._evidence: float = 0.0
		self._phase: HoldPhase = HoldPhase.IDLE

	@property
	def phase(self) -> HoldPhase:
		return self._phase

	@property
	def evidence(self) -> float:
		return self._evidence

	@property
	def progress(self) -> float:
		required = self._required()
		if required <= 0.0:
			return 0.0
		return min(1.0, self._evidence / required)

	def _required(self) -> float:
		return self.hold_ms if self.mode == "time" else float(self.hold_frames)

	def reset(self) -> None:
		self._start_ms = None
		self._count = 0
		self._evidence = 0.0
		self._phase = HoldPhase.IDLE

	def update(self, positive: bool) -> HoldUpdate:
		if not positive:
			self.reset()
			return HoldUpdate(phase=HoldPhase.IDLE, progress=0.0, evidence=0.0, confirmed=False)

		if self.mode == "time":
			now = float(self._clock())
			if self._start_ms is None:
				self._start_ms = now
			self._evidence = max(0.0, now - self._start_ms)
		else:
			self._count += 1
			self._evidence = float(self._count)

		if self._evidence >= self._required():
			held = self._evidence
			self.reset()
			return HoldUpdate(phase=HoldPhase.CONFIRMED, progress=1.0, evidence=held, confirmed=True)

		self._phase = HoldPhase.HOLDING
		return HoldUpdate(phase=HoldPhase.HOLDING, progress=self.progress, evidence=self._evidence, confirmed=False)
