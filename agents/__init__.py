from .base import Agent, AgentResult
from .generation import (
    GenerationService, GeminiGenerationService, ProxyGenerationService,
    create_generation_service,
)
from .audio_output import AudioSink, MemoryAudioSink
from .context import PresentationContext
from .narration import NarrationPlayer
from .reveal import RevealPhase, RevealScheduler
from .orchestrator import ReportOrchestrator, ReportAgent, SummaryAgent, validate_request
from .media import (
    ImageEditAgent, VideoGenerationAgent, TranscriptionAgent, SpeechFileAgent,
    poll_video_until_done,
)

__all__ = [
    "Agent", "AgentResult",
    "GenerationService", "GeminiGenerationService", "ProxyGenerationService",
    "create_generation_service",
    "AudioSink", "MemoryAudioSink", "PresentationContext",
    "NarrationPlayer", "RevealPhase", "RevealScheduler",
    "ReportOrchestrator", "ReportAgent", "SummaryAgent", "validate_request",
    "ImageEditAgent", "VideoGenerationAgent", "TranscriptionAgent", "SpeechFileAgent",
    "poll_video_until_done",
]
