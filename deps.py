"""
FastAPI dependencies. Route handlers take Depends(get_state), or the narrower
get_controller / get_frames when they only touch one collaborator.
"""
from fastapi import Depends, Request

from app_state import AppState
from copypose.frame_source import PushedFrameSource
from copypose.game.controller import GameController


def get_state(request: Request) -> AppState:
	"""Return the app state instance attached in create_app()."""
	return request.app.state.state


def get_controller(state: AppState = Depends(get_state)) -> GameController:
	return state.controller


def get_frames(state: AppState = Depends(get_state)) -> PushedFrameSource:
	return state.frames
