"""
Progressive reveal: section cadence, generation tags and mute sampling.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio

import pytest
from agents.reveal import RevealPhase, RevealScheduler


@pytest.fixture
def revealed():
    return []


@pytest.fixture
def scheduler(narrator, context, revealed):
    return RevealScheduler(narrator, context, interval=0.01, on_reveal=revealed.append)


class TestManualTicks:
    @pytest.mark.asyncio
    async def test_starts_idle(self, scheduler):
        assert scheduler.phase == RevealPhase.IDLE
        assert scheduler.tick() is None

    @pytest.mark.asyncio
    async def test_reveals_one_section_per_tick(self, scheduler, report):
        scheduler.load(report)
        assert scheduler.phase == RevealPhase.PRESENTING
        assert scheduler.visible_sections == []

        first = scheduler.tick()
        assert first.title == "Resumo Executivo"
        assert scheduler.revealed == 1
        scheduler.tick()
        scheduler.tick()
        assert scheduler.phase == RevealPhase.COMPLETE
        assert scheduler.tick() is None
        assert scheduler.revealed == scheduler.total == 3

    @pytest.mark.asyncio
    async def test_visible_text_and_traffic_data(self, scheduler, report):
        scheduler.load(report)
        scheduler.tick()
        assert scheduler.traffic_data is None
        scheduler.tick()
        assert [r.competitor for r in scheduler.traffic_data] == ["Acme", "Globex"]
        assert scheduler.visible_text.count("## ") == 2

    @pytest.mark.asyncio
    async def test_report_without_sections_is_complete(self, scheduler):
        scheduler.load("Sem títulos aqui.")
        assert scheduler.phase == RevealPhase.COMPLETE
        assert scheduler.total == 0
        assert scheduler.start() is None

    @pytest.mark.asyncio
    async def test_stale_tick_is_dropped(self, scheduler, report):
        old = scheduler.load(report)
        new = scheduler.load(report)
        assert new != old
        assert scheduler.tick(old) is None
        assert scheduler.revealed == 0
        assert scheduler.tick(new) is not None

    @pytest.mark.asyncio
    async def test_reset(self, scheduler, report):
        scheduler.load(report)
        scheduler.tick()
        scheduler.reset()
        assert scheduler.phase == RevealPhase.IDLE
        assert scheduler.visible_sections == []
        assert scheduler.report is None

    @pytest.mark.asyncio
    async def test_on_reveal_called_in_order(self, scheduler, report, revealed):
        scheduler.load(report)
        for _ in range(5):
            scheduler.tick()
        assert [s.index for s in revealed] == [0, 1, 2]


class TestNarrationDispatch:
    @pytest.mark.asyncio
    async def test_each_section_is_narrated(self, scheduler, narrator, report, service):
        generation = scheduler.load(report)
        for _ in range(3):
            scheduler.tick()
        await narrator.drain()
        assert [g for g, _ in narrator.dispatched] == [generation] * 3
        assert not narrator.dispatched[0][1].startswith("#")
        assert len(service.calls_to("generate_speech")) == 3

    @pytest.mark.asyncio
    async def test_mute_after_first_section(self, scheduler, narrator, context, report):
        scheduler.load(report)
        scheduler.tick()
        context.toggle_mute(lambda: True)
        scheduler.tick()
        scheduler.tick()
        await narrator.drain()
        assert len(narrator.dispatched) == 1

        # Unmuting never backfills the sections revealed while muted
        context.toggle_mute(lambda: False)
        assert context.muted is False
        await narrator.drain()
        assert len(narrator.dispatched) == 1


class TestTimer:
    @pytest.mark.asyncio
    async def test_timer_reveals_everything(self, scheduler, report, revealed):
        scheduler.load(report)
        scheduler.start()
        await scheduler.wait()
        assert scheduler.phase == RevealPhase.COMPLETE
        assert len(revealed) == 3

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, scheduler, report):
        scheduler.load(report)
        assert scheduler.start() is scheduler.start()
        await scheduler.wait()

    @pytest.mark.asyncio
    async def test_switching_reports_stops_the_old_timer(self, scheduler, report, revealed):
        other = "## Outro\num\n\n## Relatório\ndois"
        scheduler.load(report)
        scheduler.start()
        while scheduler.revealed < 1:
            await asyncio.sleep(0.005)

        switched_at = len(revealed)
        scheduler.load(other)
        scheduler.start()
        await scheduler.wait()
        await asyncio.sleep(0.05)

        after = revealed[switched_at:]
        assert [s.title for s in after] == ["Outro", "Relatório"]
        assert scheduler.revealed == 2

    @pytest.mark.asyncio
    async def test_reset_cancels_timer(self, scheduler, report, revealed):
        scheduler.load(report)
        scheduler.start()
        scheduler.reset()
        await asyncio.sleep(0.05)
        assert revealed == []

    @pytest.mark.asyncio
    async def test_cancel_keeps_revealed_sections(self, scheduler, report, revealed):
        scheduler.load(report)
        scheduler.tick()
        scheduler.start()
        scheduler.cancel()
        await asyncio.sleep(0.05)
        assert scheduler.revealed == 1
        assert scheduler.is_presenting

        # Starting again picks up where it stopped
        scheduler.start()
        await scheduler.wait()
        assert [s.index for s in revealed] == [0, 1, 2]


class TestCallbackAndLoopFailures:
    def test_tick_without_running_loop(self, narrator, context, report, revealed):
        scheduler = RevealScheduler(narrator, context, interval=0.01, on_reveal=revealed.append)
        scheduler.load(report)
        for _ in range(3):
            assert scheduler.tick() is not None
        assert scheduler.phase == RevealPhase.COMPLETE
        assert [s.index for s in revealed] == [0, 1, 2]
        assert narrator.dispatched == []

    @pytest.mark.asyncio
    async def test_failing_callback_keeps_timer_running(self, narrator, context, report):
        seen = []

        def render(section):
            seen.append(section.index)
            raise RuntimeError("render failed")

        scheduler = RevealScheduler(narrator, context, interval=0.01, on_reveal=render)
        scheduler.load(report)
        scheduler.start()
        await scheduler.wait()
        assert seen == [0, 1, 2]
        assert scheduler.phase == RevealPhase.COMPLETE
