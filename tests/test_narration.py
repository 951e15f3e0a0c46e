"""
Narration player: one audio source at a time, stale snippets dropped,
failures contained.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio

import pytest
from agents.mock_service import MockGenerationService
from agents.narration import NarrationPlayer


class GarbledSpeechService(MockGenerationService):
    async def generate_speech(self, text, voice):
        await self._enter("generate_speech", text)
        return b"\x01\x02\x03"


class TestSpeak:
    @pytest.mark.asyncio
    async def test_plays_decoded_audio(self, narrator, audio):
        assert await narrator.speak("Olá, agente.") is True
        assert len(audio.played) == 1
        assert audio.played[0].shape[1] == 1
        assert audio.is_playing

    @pytest.mark.asyncio
    async def test_blank_text_is_skipped(self, narrator, service):
        assert await narrator.speak("   ") is False
        assert service.calls_to("generate_speech") == []

    @pytest.mark.asyncio
    async def test_newer_snippet_wins(self, context, audio):
        narrator = NarrationPlayer(MockGenerationService(latency=0.02), context)
        first, second = await asyncio.gather(narrator.speak("um"), narrator.speak("dois"))
        assert (first, second) == (False, True)
        assert len(audio.played) == 1

    @pytest.mark.asyncio
    async def test_previous_source_stopped_before_play(self, narrator, audio):
        await narrator.speak("um")
        stops = audio.stop_count
        await narrator.speak("dois")
        assert audio.stop_count > stops
        assert len(audio.played) == 2

    @pytest.mark.asyncio
    async def test_muted_context_plays_nothing(self, narrator, context, audio):
        context.toggle_mute(lambda: True)
        assert await narrator.speak("um") is False
        assert audio.played == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_service_failure_is_skipped(self, context, audio):
        narrator = NarrationPlayer(MockGenerationService(fail_on={"generate_speech"}), context)
        assert await narrator.speak("um") is False
        assert audio.played == []

    @pytest.mark.asyncio
    async def test_undecodable_audio_is_skipped(self, context, audio):
        narrator = NarrationPlayer(GarbledSpeechService(), context)
        assert await narrator.speak("um") is False
        assert audio.played == []


class TestGenerations:
    @pytest.mark.asyncio
    async def test_invalidate_drops_in_flight_snippets(self, context, audio):
        service = MockGenerationService(latency=0.02)
        narrator = NarrationPlayer(service, context)
        narrator.dispatch("relatório antigo", narrator.generation)
        await asyncio.sleep(0)
        narrator.invalidate(narrator.generation + 1)
        await narrator.drain()
        assert audio.played == []

    @pytest.mark.asyncio
    async def test_snippet_for_old_generation_never_plays(self, narrator, audio):
        narrator.invalidate(5)
        assert await narrator.speak("atrasado", generation=4) is False
        assert audio.played == []

    @pytest.mark.asyncio
    async def test_stop_silences_and_cancels(self, context, audio):
        narrator = NarrationPlayer(MockGenerationService(latency=0.02), context)
        narrator.dispatch("um", narrator.generation)
        await asyncio.sleep(0)
        narrator.stop()
        await narrator.drain()
        assert audio.played == []
        assert audio.stop_count >= 1


class TestDispatchLog:
    @pytest.mark.asyncio
    async def test_invalidate_clears_dispatch_log(self, narrator):
        narrator.dispatch("um", narrator.generation)
        narrator.dispatch("dois", narrator.generation)
        assert len(narrator.dispatched) == 2
        narrator.invalidate(narrator.generation + 1)
        await narrator.drain()
        assert narrator.dispatched == []

    def test_dispatch_without_running_loop_is_skipped(self, narrator, service):
        assert narrator.dispatch("um", narrator.generation) is None
        assert narrator.dispatched == []
        assert service.calls_to("generate_speech") == []
