"""
Shared fixtures: mock generation backend, in-memory history database and a
fully wired presentation session.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from agents.audio_output import MemoryAudioSink
from agents.context import PresentationContext
from agents.mock_service import MockGenerationService
from agents.narration import NarrationPlayer
from db.database import create_session_factory
from db.history import HistoryStore
from utils.pipeline import build_orchestrator


REPORT_WITH_TABLE = """# Análise Competitiva

## Resumo Executivo
Acme lidera em busca orgânica.

## Resumo Comparativo das Fontes de Tráfego
| Concorrente | Busca Orgânica (%) | Busca Paga (%) | Social (%) | Direto (%) | Referência (%) |
|---|---|---|---|---|---|
| Acme | 45% | 20% | 15% | 10% | 10% |
| Globex | 30 | 25 | 25 | 15 | 5 |

## Plano de Ação
- Investir em conteúdo.
"""


@pytest.fixture
def report():
    return REPORT_WITH_TABLE


@pytest.fixture
def service():
    return MockGenerationService()


@pytest.fixture
def session_factory():
    return create_session_factory("sqlite://")


@pytest.fixture
def history(session_factory):
    store = HistoryStore(session_factory)
    store.load()
    return store


@pytest.fixture
def audio():
    return MemoryAudioSink()


@pytest.fixture
def context(history, audio):
    return PresentationContext(history=history, audio=audio)


@pytest.fixture
def narrator(service, context):
    return NarrationPlayer(service, context)


@pytest.fixture
def orchestrator(service, session_factory, audio):
    return build_orchestrator(
        service=service,
        session_factory=session_factory,
        audio=audio,
        interval=0.01,
    )
