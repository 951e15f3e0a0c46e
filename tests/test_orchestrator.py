"""
End-to-end report flow through the orchestrator using the mock backend.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio

import pytest
from agents.mock_service import MockGenerationService
from agents.reveal import RevealPhase
from config import messages
from db.history import HistoryStore
from models.schemas import AnalysisMode
from utils.pipeline import build_orchestrator, run_presentation


async def _settle(orchestrator):
    await orchestrator.scheduler.wait()
    await orchestrator.narrator.drain()


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_successful_analysis(self, orchestrator, service, audio, session_factory):
        result = await orchestrator.analyze(["Acme", "", "Globex"])
        assert result.success
        await _settle(orchestrator)

        assert service.calls_to("generate_report") == [(["Acme", "Globex"], AnalysisMode.STANDARD)]
        assert orchestrator.current_competitors == ["Acme", "Globex"]
        assert orchestrator.scheduler.phase == RevealPhase.COMPLETE
        assert orchestrator.scheduler.revealed == 4
        assert len(orchestrator.narrator.dispatched) == 4
        assert len(audio.played) == 4

        # History entry is persisted before the report is shown
        reloaded = HistoryStore(session_factory)
        reloaded.load()
        assert reloaded.items[0].id == result.metadata["history_id"]
        assert reloaded.items[0].report == orchestrator.report

    @pytest.mark.asyncio
    async def test_deep_mode(self, orchestrator, service):
        result = await orchestrator.analyze(["Acme"], AnalysisMode.DEEP)
        assert result.success
        assert service.calls_to("generate_report")[0][1] == AnalysisMode.DEEP
        assert "Investigação Profunda" in orchestrator.report
        await _settle(orchestrator)

    @pytest.mark.asyncio
    async def test_short_name_never_reaches_the_service(self, orchestrator, service):
        result = await orchestrator.analyze(["ab"])
        assert not result.success
        assert result.error == messages.FORM_HAS_ERRORS
        assert result.metadata["field_errors"] == [messages.NAME_TOO_SHORT]
        assert service.calls == []
        assert len(orchestrator.history) == 0

    @pytest.mark.asyncio
    async def test_all_blank_never_reaches_the_service(self, orchestrator, service):
        result = await orchestrator.analyze(["", " ", ""])
        assert result.error == messages.EMPTY_COMPETITORS
        assert service.calls == []

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_state(self, orchestrator, service):
        await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)
        report = orchestrator.report

        service.fail_on.add("generate_report")
        result = await orchestrator.analyze(["Globex"])
        assert not result.success
        assert result.error == messages.GENERATION_FAILED
        assert orchestrator.error == messages.GENERATION_FAILED
        assert orchestrator.report == report
        assert orchestrator.current_competitors == ["Acme"]
        assert len(orchestrator.history) == 1
        assert orchestrator.is_loading is False

    @pytest.mark.asyncio
    async def test_second_request_while_loading_is_rejected(self, session_factory, audio):
        service = MockGenerationService(latency=0.05)
        orchestrator = build_orchestrator(service, session_factory, audio, interval=0.01)

        first = asyncio.ensure_future(orchestrator.analyze(["Acme"]))
        await asyncio.sleep(0)
        assert orchestrator.is_loading

        second = await orchestrator.analyze(["Globex"])
        assert not second.success
        assert second.error == messages.ANALYSIS_IN_PROGRESS

        assert (await first).success
        assert len(service.calls_to("generate_report")) == 1
        await _settle(orchestrator)

    @pytest.mark.asyncio
    async def test_new_analysis_replaces_presentation(self, orchestrator):
        await orchestrator.analyze(["Acme"])
        await orchestrator.analyze(["Globex"])
        await _settle(orchestrator)
        assert orchestrator.current_competitors == ["Globex"]
        assert orchestrator.scheduler.report == orchestrator.report
        assert len(orchestrator.history) == 2
        assert orchestrator.history.items[0].competitors == ["Globex"]


class TestHistoryActions:
    @pytest.mark.asyncio
    async def test_select_history_item(self, orchestrator):
        await orchestrator.analyze(["Acme"])
        await orchestrator.analyze(["Globex"])
        await _settle(orchestrator)

        older = orchestrator.history.items[1]
        await orchestrator.select_history_item(older)
        await _settle(orchestrator)
        assert orchestrator.report == older.report
        assert orchestrator.current_competitors == ["Acme"]
        assert orchestrator.scheduler.revealed == orchestrator.scheduler.total

    @pytest.mark.asyncio
    async def test_new_investigation_highlights_current_item(self, orchestrator):
        result = await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)

        highlighted = orchestrator.new_investigation()
        assert highlighted == result.metadata["history_id"]
        assert orchestrator.report is None
        assert orchestrator.scheduler.phase == RevealPhase.IDLE

    @pytest.mark.asyncio
    async def test_new_investigation_without_report(self, orchestrator):
        assert orchestrator.new_investigation() is None

    @pytest.mark.asyncio
    async def test_clear_history_requires_confirmation(self, orchestrator, session_factory):
        await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)

        assert orchestrator.clear_history(lambda: False) is False
        assert len(orchestrator.history) == 1

        assert orchestrator.clear_history(lambda: True) is True
        assert len(orchestrator.history) == 0
        assert orchestrator.report is None
        reloaded = HistoryStore(session_factory)
        reloaded.load()
        assert len(reloaded) == 0


class TestMute:
    @pytest.mark.asyncio
    async def test_mute_requires_confirmation(self, orchestrator):
        assert orchestrator.toggle_mute(lambda: False) is False
        assert orchestrator.context.muted is False

    @pytest.mark.asyncio
    async def test_mute_stops_audio_and_later_narration(self, session_factory, audio):
        service = MockGenerationService()
        orchestrator = build_orchestrator(service, session_factory, audio, interval=0.02)
        await orchestrator.analyze(["Acme"])
        while orchestrator.scheduler.revealed < 1:
            await asyncio.sleep(0.005)

        stops = audio.stop_count
        assert orchestrator.toggle_mute(lambda: True) is True
        assert audio.stop_count > stops
        assert not audio.is_playing

        await _settle(orchestrator)
        assert len(orchestrator.narrator.dispatched) == 1
        assert orchestrator.scheduler.revealed == 4

    @pytest.mark.asyncio
    async def test_mute_persists_across_reports(self, orchestrator):
        orchestrator.toggle_mute(lambda: True)
        await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)
        assert orchestrator.narrator.dispatched == []


class TestCinematicBriefing:
    @pytest.mark.asyncio
    async def test_needs_a_report(self, orchestrator):
        result = await orchestrator.cinematic_briefing()
        assert not result.success

    @pytest.mark.asyncio
    async def test_speaks_summary(self, orchestrator, service):
        await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)
        result = await orchestrator.cinematic_briefing()
        assert result.success
        assert result.metadata["spoken"] is True
        assert service.calls_to("generate_speech")[-1] == result.data

    @pytest.mark.asyncio
    async def test_summary_failure(self, orchestrator, service):
        await orchestrator.analyze(["Acme"])
        await _settle(orchestrator)
        service.fail_on.add("summarize_for_narration")
        result = await orchestrator.cinematic_briefing()
        assert result.error == messages.SPEECH_FAILED


class TestRunPresentation:
    @pytest.mark.asyncio
    async def test_runs_to_completion(self, orchestrator):
        report = await run_presentation(orchestrator, ["Acme", "Globex", "Initech"])
        assert report is not None
        assert orchestrator.summary()["phase"] == "complete"
        assert orchestrator.summary()["history"] == 1

    @pytest.mark.asyncio
    async def test_failure_returns_none(self, session_factory, audio):
        service = MockGenerationService(fail_on={"generate_report"})
        orchestrator = build_orchestrator(service, session_factory, audio, interval=0.01)
        assert await run_presentation(orchestrator, ["Acme"]) is None
