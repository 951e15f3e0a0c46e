"""
Media tools: image editing, image-to-video, audio transcription and
text-to-speech rendered to a downloadable WAV file.

Each tool is an Agent so the dashboard gets the same result envelope
(and the same logging) as report generation.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from agents.base import Agent
from agents.generation import GenerationService
from config import messages
from config.settings import settings
from models.exceptions import ExternalServiceError, ValidationError
from models.schemas import VideoOperation
from utils.audio import decode_to_playable_buffer, encode_to_container_file

logger = logging.getLogger(__name__)


@dataclass
class ImageInput:
    data: bytes
    mime_type: str
    instruction: str


@dataclass
class VideoRequest:
    image: ImageInput
    aspect_ratio: str = "16:9"


@dataclass
class AudioInput:
    data: bytes
    mime_type: str


@dataclass
class SpeechRequest:
    text: str
    voice: str = settings.NARRATION_VOICE


async def poll_video_until_done(
    service: GenerationService,
    operation: VideoOperation,
    interval: float = settings.VIDEO_POLL_INTERVAL_SECONDS,
    on_poll: Optional[Callable[[VideoOperation, int], None]] = None,
) -> VideoOperation:
    """
    Poll a video operation at a fixed interval until it reports done.

    There is no overall timeout; a poll error ends the loop by raising.
    """
    polls = 0
    while not operation.done:
        await asyncio.sleep(interval)
        operation = await service.poll_video_operation(operation)
        polls += 1
        logger.debug(f"Video operation {operation.name}: poll {polls}, done={operation.done}")
        if on_poll is not None:
            on_poll(operation, polls)
    return operation


class ImageEditAgent(Agent):
    failure_message = messages.IMAGE_EDIT_FAILED

    def __init__(self, service: GenerationService):
        super().__init__("ImageEditAgent")
        self.service = service

    async def run(self, data: ImageInput) -> bytes:
        if not data.data or not data.instruction.strip():
            raise ValidationError("Imagem e instrução são obrigatórias.")
        return await self.service.edit_image(data.data, data.mime_type, data.instruction)


class VideoGenerationAgent(Agent):
    """Start a video job, poll it to completion and download the result."""

    failure_message = messages.VIDEO_START_FAILED

    def __init__(
        self,
        service: GenerationService,
        poll_interval: float = settings.VIDEO_POLL_INTERVAL_SECONDS,
        on_poll: Optional[Callable[[VideoOperation, int], None]] = None,
    ):
        super().__init__("VideoGenerationAgent")
        self.service = service
        self.poll_interval = poll_interval
        self.on_poll = on_poll

    async def run(self, data: VideoRequest) -> bytes:
        self.failure_message = messages.VIDEO_START_FAILED
        if data.aspect_ratio not in settings.VIDEO_ASPECT_RATIOS:
            raise ValidationError(f"Proporção inválida: {data.aspect_ratio}")
        if not data.image.data:
            raise ValidationError("Imagem é obrigatória.")

        operation = await self.service.generate_video(
            data.image.data, data.image.mime_type, data.image.instruction, data.aspect_ratio,
        )
        self.logger.info(f"🎞️ Video operation started: {operation.name}")
        self.failure_message = messages.VIDEO_POLL_FAILED
        operation = await poll_video_until_done(
            self.service, operation, self.poll_interval, self.on_poll,
        )

        if operation.error:
            raise ExternalServiceError(operation.error)
        if not operation.video_uri:
            raise ExternalServiceError(messages.VIDEO_EMPTY)
        return await self.service.download_video(operation.video_uri)


class TranscriptionAgent(Agent):
    failure_message = messages.TRANSCRIPTION_FAILED

    def __init__(self, service: GenerationService):
        super().__init__("TranscriptionAgent")
        self.service = service

    async def run(self, data: AudioInput) -> str:
        if not data.data:
            raise ValidationError("Áudio é obrigatório.")
        return await self.service.transcribe_audio(data.data, data.mime_type)


class SpeechFileAgent(Agent):
    """Text -> speech -> WAV bytes ready for download or playback."""

    failure_message = messages.SPEECH_FAILED

    def __init__(
        self,
        service: GenerationService,
        sample_rate: int = settings.AUDIO_SAMPLE_RATE,
        channels: int = settings.AUDIO_CHANNELS,
    ):
        super().__init__("SpeechFileAgent")
        self.service = service
        self.sample_rate = sample_rate
        self.channels = channels

    async def run(self, data: SpeechRequest) -> bytes:
        if not data.text.strip():
            raise ValidationError("Texto é obrigatório.")
        pcm = await self.service.generate_speech(data.text, data.voice)
        buffer = decode_to_playable_buffer(pcm, self.channels)
        return encode_to_container_file(buffer, self.sample_rate)
