"""
Generation Service
-------------------
Boundary to the external generative-AI service. The rest of the code only
sees opaque request/response pairs:

  generate_report(competitors, mode)            -> str (markdown)
  generate_speech(text, voice)                  -> bytes (raw 24 kHz int16 PCM)
  edit_image(image, mime_type, instruction)     -> bytes
  generate_video(image, mime, instruction, ar)  -> VideoOperation
  poll_video_operation(operation)               -> VideoOperation
  download_video(uri)                           -> bytes
  transcribe_audio(audio, mime_type)            -> str
  summarize_for_narration(report)               -> str

Implementations:
  - GeminiGenerationService: google-genai async client
  - ProxyGenerationService:  our FastAPI relay (api/), over HTTP
  - MockGenerationService:   canned content (agents/mock_service.py)
"""

import asyncio
import base64
import logging
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests
from google import genai
from google.genai import types

from agents import prompts
from config.settings import settings
from models.exceptions import ExternalServiceError
from models.schemas import AnalysisMode, VideoOperation
from utils.audio import decode_base64_audio

logger = logging.getLogger(__name__)


class GenerationService(ABC):

    @abstractmethod
    async def generate_report(self, competitors: List[str], mode: AnalysisMode) -> str: ...

    @abstractmethod
    async def generate_speech(self, text: str, voice: str) -> bytes: ...

    @abstractmethod
    async def edit_image(self, image: bytes, mime_type: str, instruction: str) -> bytes: ...

    @abstractmethod
    async def generate_video(
        self, image: bytes, mime_type: str, instruction: str, aspect_ratio: str
    ) -> VideoOperation: ...

    @abstractmethod
    async def poll_video_operation(self, operation: VideoOperation) -> VideoOperation: ...

    @abstractmethod
    async def download_video(self, uri: str) -> bytes: ...

    @abstractmethod
    async def transcribe_audio(self, audio: bytes, mime_type: str) -> str: ...

    @abstractmethod
    async def summarize_for_narration(self, report: str) -> str: ...


def http_get_with_retry(url: str, session: Optional[requests.Session] = None, **kwargs) -> requests.Response:
    """HTTP GET with retry + exponential backoff (blocking; run it in a thread)."""
    getter = session.get if session is not None else requests.get
    for attempt in range(settings.MAX_RETRIES):
        try:
            resp = getter(url, timeout=settings.REQUEST_TIMEOUT, **kwargs)
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            wait = (2 ** attempt) + random.uniform(0, 1)
            logger.warning(f"Attempt {attempt+1} failed for {url}: {e}. Retrying in {wait:.1f}s")
            time.sleep(wait)
    raise ExternalServiceError(f"Failed to fetch {url} after {settings.MAX_RETRIES} attempts")


# ─── Gemini ──────────────────────────────────────────────────────────────────

SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


def _first_inline_data(response: Any) -> bytes:
    for candidate in response.candidates or []:
        parts = candidate.content.parts if candidate.content else None
        for part in parts or []:
            if part.inline_data and part.inline_data.data:
                return part.inline_data.data
    raise ExternalServiceError("No inline media was returned from the API.")


def _to_video_operation(op: Any) -> VideoOperation:
    uri = None
    if op.response and op.response.generated_videos:
        video = op.response.generated_videos[0].video
        uri = video.uri if video else None
    return VideoOperation(
        name=op.name,
        done=bool(op.done),
        video_uri=uri,
        error=str(op.error) if op.error else None,
    )


class GeminiGenerationService(GenerationService):

    def __init__(self, api_key: Optional[str] = None, client: Optional[genai.Client] = None):
        self.api_key = api_key or settings.GEMINI_API_KEY
        if client is None:
            if not self.api_key:
                raise ExternalServiceError("GEMINI_API_KEY is not defined")
            client = genai.Client(api_key=self.api_key)
        self.client = client

    async def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig) -> Any:
        try:
            return await self.client.aio.models.generate_content(
                model=model, contents=contents, config=config,
            )
        except Exception as e:
            raise ExternalServiceError(f"{model} request failed: {e}") from e

    async def generate_report(self, competitors: List[str], mode: AnalysisMode) -> str:
        if mode == AnalysisMode.DEEP:
            prompt = prompts.deep_report_prompt(competitors)
            tools = [types.Tool(google_search=types.GoogleSearch())]
        else:
            prompt = prompts.standard_report_prompt(competitors)
            tools = None

        response = await self._generate(
            settings.REPORT_MODEL,
            prompt,
            types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS, tools=tools),
        )
        if not response.text:
            raise ExternalServiceError("Empty report returned from the API.")
        return response.text

    async def generate_speech(self, text: str, voice: str) -> bytes:
        response = await self._generate(
            settings.SPEECH_MODEL,
            text,
            types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                    ),
                ),
                safety_settings=SAFETY_SETTINGS,
            ),
        )
        return _first_inline_data(response)

    async def edit_image(self, image: bytes, mime_type: str, instruction: str) -> bytes:
        response = await self._generate(
            settings.IMAGE_MODEL,
            [types.Part.from_bytes(data=image, mime_type=mime_type), instruction],
            types.GenerateContentConfig(
                response_modalities=["IMAGE"],
                safety_settings=SAFETY_SETTINGS,
            ),
        )
        return _first_inline_data(response)

    async def generate_video(
        self, image: bytes, mime_type: str, instruction: str, aspect_ratio: str
    ) -> VideoOperation:
        try:
            op = await self.client.aio.models.generate_videos(
                model=settings.VIDEO_MODEL,
                prompt=instruction,
                image=types.Image(image_bytes=image, mime_type=mime_type),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution="720p",
                    aspect_ratio=aspect_ratio,
                ),
            )
        except Exception as e:
            raise ExternalServiceError(f"Video generation failed to start: {e}") from e
        return _to_video_operation(op)

    async def poll_video_operation(self, operation: VideoOperation) -> VideoOperation:
        try:
            op = await self.client.aio.operations.get(
                types.GenerateVideosOperation(name=operation.name)
            )
        except Exception as e:
            raise ExternalServiceError(f"Video operation poll failed: {e}") from e
        return _to_video_operation(op)

    async def download_video(self, uri: str) -> bytes:
        resp = await asyncio.to_thread(http_get_with_retry, uri, params={"key": self.api_key})
        return resp.content

    async def transcribe_audio(self, audio: bytes, mime_type: str) -> str:
        response = await self._generate(
            settings.FAST_MODEL,
            [types.Part.from_bytes(data=audio, mime_type=mime_type), prompts.TRANSCRIPTION_PROMPT],
            types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS),
        )
        return response.text or ""

    async def summarize_for_narration(self, report: str) -> str:
        response = await self._generate(
            settings.FAST_MODEL,
            prompts.narration_summary_prompt(report),
            types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS),
        )
        return (response.text or "").strip()


# ─── Proxy (our FastAPI relay) ───────────────────────────────────────────────

def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class ProxyGenerationService(GenerationService):
    """
    Talks to the request-forwarding API in `api/`. Generation POSTs are not
    retried: a failed report request is surfaced, never silently repeated.
    """

    def __init__(self, base_url: str = settings.PROXY_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.post(url, json=payload, timeout=settings.REQUEST_TIMEOUT)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalServiceError(f"POST {path} failed: {e}") from e

    async def _call(self, path: str, payload: Dict[str, Any], key: str) -> Any:
        data = await asyncio.to_thread(self._post, path, payload)
        if key not in data:
            raise ExternalServiceError(f"POST {path}: response is missing '{key}'")
        return data[key]

    async def generate_report(self, competitors: List[str], mode: AnalysisMode) -> str:
        path = "/generate-deep-analysis" if mode == AnalysisMode.DEEP else "/generate-analysis"
        return await self._call(path, {"competitors": list(competitors)}, "report")

    async def generate_speech(self, text: str, voice: str) -> bytes:
        audio = await self._call("/generate-speech", {"text": text, "voice_name": voice}, "audio_content")
        return decode_base64_audio(audio)

    async def edit_image(self, image: bytes, mime_type: str, instruction: str) -> bytes:
        payload = {"image_data": _b64(image), "mime_type": mime_type, "prompt": instruction}
        data = await self._call("/edit-image", payload, "image_data")
        return base64.b64decode(data)

    async def generate_video(
        self, image: bytes, mime_type: str, instruction: str, aspect_ratio: str
    ) -> VideoOperation:
        payload = {
            "image_data": _b64(image),
            "mime_type": mime_type,
            "prompt": instruction,
            "aspect_ratio": aspect_ratio,
        }
        data = await asyncio.to_thread(self._post, "/generate-video", payload)
        return self._video_operation(data)

    async def poll_video_operation(self, operation: VideoOperation) -> VideoOperation:
        data = await asyncio.to_thread(self._post, "/get-video-operation", {"operation": operation.name})
        return self._video_operation(data)

    @staticmethod
    def _video_operation(data: Dict[str, Any]) -> VideoOperation:
        if "name" not in data:
            raise ExternalServiceError("Video operation response is missing 'name'")
        return VideoOperation(
            name=data["name"],
            done=bool(data.get("done")),
            video_uri=data.get("video_uri"),
            error=data.get("error"),
        )

    async def download_video(self, uri: str) -> bytes:
        resp = await asyncio.to_thread(
            http_get_with_retry, f"{self.base_url}/video-file", self.session, params={"uri": uri},
        )
        return resp.content

    async def transcribe_audio(self, audio: bytes, mime_type: str) -> str:
        payload = {"audio_data": _b64(audio), "mime_type": mime_type}
        return await self._call("/transcribe-audio", payload, "transcription")

    async def summarize_for_narration(self, report: str) -> str:
        return await self._call("/generate-impactful-summary", {"report_content": report}, "summary")


def create_generation_service(backend: str = settings.BACKEND) -> GenerationService:
    if backend == "gemini":
        return GeminiGenerationService()
    if backend == "proxy":
        return ProxyGenerationService()
    if backend == "mock":
        from agents.mock_service import MockGenerationService
        return MockGenerationService()
    raise ValueError(f"Unknown generation backend: {backend}")
