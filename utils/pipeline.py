"""
Pipeline wiring: builds one presentation session (context, history, narrator,
reveal scheduler, orchestrator) and runs a report through it end to end.

Architecture:
  ReportAgent → HistoryStore → RevealScheduler ⇄ NarrationPlayer → AudioSink
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from agents.audio_output import AudioSink, MemoryAudioSink
from agents.context import PresentationContext
from agents.generation import GenerationService, create_generation_service
from agents.narration import NarrationPlayer
from agents.orchestrator import ReportOrchestrator
from agents.reveal import RevealScheduler
from config.settings import settings
from db.database import SessionLocal, init_db
from db.history import HistoryStore
from models.schemas import AnalysisMode, Section

logger = logging.getLogger(__name__)


def build_orchestrator(
    service: Optional[GenerationService] = None,
    session_factory: Optional[sessionmaker] = None,
    audio: Optional[AudioSink] = None,
    interval: float = settings.REVEAL_INTERVAL_SECONDS,
    on_reveal: Optional[Callable[[Section], None]] = None,
    muted: bool = False,
) -> ReportOrchestrator:
    """
    Assemble a ReportOrchestrator with its collaborators.

    Parameters
    ----------
    service : GenerationService, optional
        Defaults to the backend named by SPYGLASS_BACKEND.
    session_factory : sessionmaker, optional
        History database; defaults to DATABASE_URL (tables created on demand).
    audio : AudioSink, optional
        Where narration plays; defaults to an in-memory sink.
    """
    if session_factory is None:
        init_db()
        session_factory = SessionLocal

    service = service or create_generation_service()
    history = HistoryStore(session_factory)
    history.load()

    context = PresentationContext(history=history, audio=audio or MemoryAudioSink(), muted=muted)
    narrator = NarrationPlayer(service, context)
    scheduler = RevealScheduler(narrator, context, interval=interval, on_reveal=on_reveal)
    return ReportOrchestrator(service, context, narrator, scheduler)


async def run_presentation(
    orchestrator: ReportOrchestrator,
    competitors: List[str],
    mode: AnalysisMode = AnalysisMode.STANDARD,
) -> Optional[str]:
    """
    Request a report and wait until every section has been revealed and
    all narration has settled. Returns the report, or None on failure.
    """
    result = await orchestrator.analyze(competitors, mode)
    if not result.success:
        logger.error(f"Analysis failed: {result.error}")
        return None

    await orchestrator.scheduler.wait()
    await orchestrator.narrator.drain()
    logger.info(orchestrator.summary())
    return result.data
