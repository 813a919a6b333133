"""Pydantic request/response models for API validation and docs."""
from schemas.requests import GameStartPayload
from schemas.responses import GameActionResponse, GameSnapshot, GameStatusResponse, LoopStatus

__all__ = [
	"GameStartPayload",
	"GameActionResponse",
	"GameSnapshot",
	"GameStatusResponse",
	"LoopStatus",
]
