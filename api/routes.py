"""
FastAPI Route Handlers
Spyglass request-forwarding API: relays browser/dashboard requests to the
generation service so the API key never leaves the server.
"""

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import Response

from api.schemas import (
    AnalysisRequest, ImageEditRequest, VideoRequest, VideoOperationRequest,
    TranscriptionRequest, SpeechRequest, SummaryRequest,
    ReportResponse, ImageResponse, VideoOperationResponse, TranscriptionResponse,
    SpeechResponse, SummaryResponse, HealthResponse,
)
from agents.generation import GenerationService, create_generation_service
from config.settings import settings
from models.schemas import AnalysisMode, VideoOperation

logger = logging.getLogger(__name__)

router = APIRouter()

# One service instance per process
_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    global _service
    if _service is None:
        # The proxy backend would forward to this very API
        backend = "gemini" if settings.BACKEND == "proxy" else settings.BACKEND
        _service = create_generation_service(backend)
        logger.info(f"Generation backend: {backend}")
    return _service


def _decode(data: str, field: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail=f"Field '{field}' is not valid base64.")


def _encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


# ─── Health ──────────────────────────────────────────────────────────────────

@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    return HealthResponse(
        status="ok",
        version=settings.APP_VERSION,
        backend=settings.BACKEND,
        timestamp=datetime.now(timezone.utc),
    )


# ─── Reports ─────────────────────────────────────────────────────────────────

async def _analysis(request: AnalysisRequest, mode: AnalysisMode, service: GenerationService) -> ReportResponse:
    competitors = [c.strip() for c in request.competitors if c and c.strip()]
    if not competitors:
        raise HTTPException(status_code=400, detail="Competitors list is required.")

    try:
        report = await service.generate_report(competitors, mode)
    except Exception as e:
        logger.error(f"Report generation failed ({mode.value}): {e}")
        detail = "Failed to generate deep analysis." if mode == AnalysisMode.DEEP else "Failed to generate analysis."
        raise HTTPException(status_code=500, detail=detail)
    return ReportResponse(report=report)


@router.post("/generate-analysis", response_model=ReportResponse, tags=["Reports"])
async def generate_analysis(request: AnalysisRequest, service: GenerationService = Depends(get_generation_service)):
    return await _analysis(request, AnalysisMode.STANDARD, service)


@router.post("/generate-deep-analysis", response_model=ReportResponse, tags=["Reports"])
async def generate_deep_analysis(request: AnalysisRequest, service: GenerationService = Depends(get_generation_service)):
    return await _analysis(request, AnalysisMode.DEEP, service)


@router.post("/generate-impactful-summary", response_model=SummaryResponse, tags=["Reports"])
async def generate_impactful_summary(request: SummaryRequest, service: GenerationService = Depends(get_generation_service)):
    if not request.report_content.strip():
        raise HTTPException(status_code=400, detail="Report content is required.")
    try:
        summary = await service.summarize_for_narration(request.report_content)
    except Exception as e:
        logger.error(f"Summary generation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate summary.")
    return SummaryResponse(summary=summary)


# ─── Media ───────────────────────────────────────────────────────────────────

@router.post("/edit-image", response_model=ImageResponse, tags=["Media"])
async def edit_image(request: ImageEditRequest, service: GenerationService = Depends(get_generation_service)):
    if not request.image_data or not request.mime_type or not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Image data, mime type, and prompt are required.")
    image = _decode(request.image_data, "image_data")
    try:
        edited = await service.edit_image(image, request.mime_type, request.prompt)
    except Exception as e:
        logger.error(f"Image edit failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to edit image.")
    return ImageResponse(image_data=_encode(edited))


@router.post("/generate-video", response_model=VideoOperationResponse, tags=["Media"])
async def generate_video(request: VideoRequest, service: GenerationService = Depends(get_generation_service)):
    if (
        not request.image_data or not request.mime_type or not request.prompt.strip()
        or request.aspect_ratio not in settings.VIDEO_ASPECT_RATIOS
    ):
        raise HTTPException(
            status_code=400,
            detail="Image data, mime type, prompt, and aspect ratio are required.",
        )
    image = _decode(request.image_data, "image_data")
    try:
        operation = await service.generate_video(image, request.mime_type, request.prompt, request.aspect_ratio)
    except Exception as e:
        logger.error(f"Video generation failed to start: {e}")
        raise HTTPException(status_code=500, detail="Failed to start video generation.")
    return VideoOperationResponse(**operation.to_dict())


@router.post("/get-video-operation", response_model=VideoOperationResponse, tags=["Media"])
async def get_video_operation(request: VideoOperationRequest, service: GenerationService = Depends(get_generation_service)):
    if not request.operation:
        raise HTTPException(status_code=400, detail="Operation is required.")
    try:
        operation = await service.poll_video_operation(VideoOperation(name=request.operation))
    except Exception as e:
        logger.error(f"Video operation poll failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to get video operation status.")
    return VideoOperationResponse(**operation.to_dict())


@router.get("/video-file", tags=["Media"])
async def get_video_file(uri: str = "", service: GenerationService = Depends(get_generation_service)):
    """Download a finished video server-side so the API key stays here."""
    if not uri:
        raise HTTPException(status_code=400, detail="Video uri is required.")
    try:
        content = await service.download_video(uri)
    except Exception as e:
        logger.error(f"Video download failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to download video.")
    return Response(content=content, media_type="video/mp4")


@router.post("/transcribe-audio", response_model=TranscriptionResponse, tags=["Media"])
async def transcribe_audio(request: TranscriptionRequest, service: GenerationService = Depends(get_generation_service)):
    if not request.audio_data or not request.mime_type:
        raise HTTPException(status_code=400, detail="Audio data and mime type are required.")
    audio = _decode(request.audio_data, "audio_data")
    try:
        text = await service.transcribe_audio(audio, request.mime_type)
    except Exception as e:
        logger.error(f"Transcription failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to transcribe audio.")
    return TranscriptionResponse(transcription=text)


@router.post("/generate-speech", response_model=SpeechResponse, tags=["Media"])
async def generate_speech(request: SpeechRequest, service: GenerationService = Depends(get_generation_service)):
    if not request.text.strip() or not request.voice_name:
        raise HTTPException(status_code=400, detail="Text and voice name are required.")
    try:
        pcm = await service.generate_speech(request.text, request.voice_name)
    except Exception as e:
        logger.error(f"Speech generation failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate speech.")
    return SpeechResponse(audio_content=_encode(pcm))
