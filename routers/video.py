"""Frame input routes. Routes: /video/frame, /video/status."""
import asyncio

from fastapi import APIRouter, Depends, HTTPException, Request

from copypose.frame_source import PushedFrameSource
from deps import get_frames

router = APIRouter(tags=["video"])


@router.post("/video/frame")
async def video_frame(request: Request, frames: PushedFrameSource = Depends(get_frames)):
	"""Push one JPEG frame (raw request body). Only the newest frame is scored."""
	data = await request.body()
	try:
		frame = await asyncio.get_running_loop().run_in_executor(None, frames.push_jpeg, data)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e)) from e
	return {"detail": "Frame accepted.", "seq": frame.seq}


@router.get("/video/status")
async def video_status(frames: PushedFrameSource = Depends(get_frames)):
	return frames.get_status()
