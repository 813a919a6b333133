"""Pydantic request body models."""
from typing import Optional

from pydantic import BaseModel, Field


class GameStartPayload(BaseModel):
	"""Optional body for POST /game/start and /game/restart."""

	seed: Optional[int] = Field(None, description="Seed for this session's pose order; random if omitted")
