"""
Pydantic schemas for API request/response validation.
Binary payloads travel base64-encoded.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# ─── Request Schemas ─────────────────────────────────────────────────────────

class AnalysisRequest(BaseModel):
    competitors: List[str] = []


class ImageEditRequest(BaseModel):
    image_data: str = ""
    mime_type: str = "image/png"
    prompt: str = ""


class VideoRequest(BaseModel):
    image_data: str = ""
    mime_type: str = "image/png"
    prompt: str = ""
    aspect_ratio: str = Field("16:9", description="16:9 | 9:16")


class VideoOperationRequest(BaseModel):
    operation: str = ""


class TranscriptionRequest(BaseModel):
    audio_data: str = ""
    mime_type: str = "audio/webm"


class SpeechRequest(BaseModel):
    text: str = ""
    voice_name: str = "Kore"


class SummaryRequest(BaseModel):
    report_content: str = ""


# ─── Response Schemas ────────────────────────────────────────────────────────

class ReportResponse(BaseModel):
    report: str


class ImageResponse(BaseModel):
    image_data: str


class VideoOperationResponse(BaseModel):
    name: str
    done: bool = False
    video_uri: Optional[str] = None
    error: Optional[str] = None


class TranscriptionResponse(BaseModel):
    transcription: str


class SpeechResponse(BaseModel):
    audio_content: str


class SummaryResponse(BaseModel):
    summary: str


class HealthResponse(BaseModel):
    status: str
    version: str
    backend: str
    timestamp: datetime
