"""
Mock generation service for demos and tests.

Produces a deterministic report in the same shape the real templates ask for
(a title, `## ` sections, the traffic comparison table), a short tone for
speech, and a video operation that completes after a few polls.
"""

import asyncio
import hashlib
import logging
from typing import Any, Iterable, List, Set, Tuple

import numpy as np

from agents.generation import GenerationService
from config.settings import settings
from models.exceptions import ExternalServiceError
from models.schemas import AnalysisMode, VideoOperation

logger = logging.getLogger(__name__)


def _shares(name: str) -> List[int]:
    """Stable pseudo-random traffic split summing to 100."""
    digest = hashlib.sha256(name.encode()).digest()
    weights = [b + 20 for b in digest[:5]]
    total = sum(weights)
    shares = [round(100 * w / total) for w in weights]
    shares[0] += 100 - sum(shares)
    return shares


def build_mock_report(competitors: List[str], mode: AnalysisMode = AnalysisMode.STANDARD) -> str:
    title = (
        "Investigação Profunda: Dossiê de Inteligência Aprimorado"
        if mode == AnalysisMode.DEEP
        else "Análise Competitiva: Dossiê de Inteligência"
    )
    rows = "\n".join(
        f"| {c} | " + " | ".join(str(s) for s in _shares(c)) + " |" for c in competitors
    )
    placeholders = "\n".join(f"[SCREENSHOT_PLACEHOLDER_FOR_{c}]" for c in competitors)
    return f"""# {title}

## Resumo Executivo
Os alvos {", ".join(competitors)} disputam o mesmo público com estratégias distintas.
{placeholders}

## Resumo Comparativo das Fontes de Tráfego
| Concorrente | Busca Orgânica (%) | Busca Paga (%) | Social (%) | Direto (%) | Referência (%) |
|---|---|---|---|---|---|
{rows}

## Presença nas Redes Sociais
Instagram e LinkedIn concentram o engajamento; a frequência de postagem é irregular.

## Plano de Ação Recomendado
- Atacar palavras-chave de cauda longa negligenciadas.
- Lançar uma isca digital clara para capturar leads.
"""


class MockGenerationService(GenerationService):
    """
    Offline stand-in for the generation service.

    `fail_on` names methods that should raise ExternalServiceError;
    `latency` adds an await before each response; `calls` records every call.
    """

    def __init__(
        self,
        fail_on: Iterable[str] = (),
        latency: float = 0.0,
        polls_until_done: int = 2,
        speech_seconds: float = 0.25,
    ):
        self.fail_on: Set[str] = set(fail_on)
        self.latency = latency
        self.polls_until_done = polls_until_done
        self.speech_seconds = speech_seconds
        self.calls: List[Tuple[str, Any]] = []
        self._polls = 0

    async def _enter(self, method: str, payload: Any) -> None:
        self.calls.append((method, payload))
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)
        if method in self.fail_on:
            logger.debug(f"Mock failing {method}")
            raise ExternalServiceError(f"mock failure in {method}")

    def calls_to(self, method: str) -> List[Any]:
        return [payload for name, payload in self.calls if name == method]

    async def generate_report(self, competitors: List[str], mode: AnalysisMode) -> str:
        await self._enter("generate_report", (list(competitors), mode))
        return build_mock_report(competitors, mode)

    async def generate_speech(self, text: str, voice: str) -> bytes:
        await self._enter("generate_speech", text)
        rate = settings.AUDIO_SAMPLE_RATE
        t = np.arange(int(rate * self.speech_seconds)) / rate
        tone = 0.3 * np.sin(2 * np.pi * 440.0 * t)
        return (tone * 32767).astype("<i2").tobytes()

    async def edit_image(self, image: bytes, mime_type: str, instruction: str) -> bytes:
        await self._enter("edit_image", instruction)
        return image

    async def generate_video(
        self, image: bytes, mime_type: str, instruction: str, aspect_ratio: str
    ) -> VideoOperation:
        await self._enter("generate_video", (instruction, aspect_ratio))
        self._polls = 0
        return VideoOperation(name="operations/mock-video")

    async def poll_video_operation(self, operation: VideoOperation) -> VideoOperation:
        await self._enter("poll_video_operation", operation.name)
        self._polls += 1
        if self._polls < self.polls_until_done:
            return VideoOperation(name=operation.name)
        return VideoOperation(
            name=operation.name, done=True, video_uri="https://example.invalid/mock-video.mp4",
        )

    async def download_video(self, uri: str) -> bytes:
        await self._enter("download_video", uri)
        return b"\x00\x00\x00\x18ftypmp42"

    async def transcribe_audio(self, audio: bytes, mime_type: str) -> str:
        await self._enter("transcribe_audio", mime_type)
        return "Transcrição simulada."

    async def summarize_for_narration(self, report: str) -> str:
        await self._enter("summarize_for_narration", len(report))
        return "Enquanto os alvos dormem, suas fraquezas foram expostas. É hora de atacar."
