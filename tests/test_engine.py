"""Tests for the annotation engine's pass orchestration."""

import asyncio

import pytest

from glossa_core.config import Config
from glossa_core.engine import AnnotationEngine, EngineSettings, PassReport
from glossa_core.strategies import AnnotationStrategy


class BrokenStrategy(AnnotationStrategy):
    name = "broken"

    async def apply(self, ctx, root=None):
        raise RuntimeError("boom")


@pytest.mark.asyncio
class TestAnnotationEngine:

    async def test_start_runs_initial_pass(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Spark</p>')

        report = await engine.start()

        assert report.kind == "full"
        assert report.total == 1
        assert engine.scheduler.started
        engine.close()

    async def test_new_content_annotated_after_burst(self, make_engine):
        document, engine = make_engine("<main></main>")
        await engine.start()

        for _ in range(5):
            document.append_html(document.soup.main, '<p data-test="skill-name">Spark</p>')
        await engine.wait_idle()

        texts = [p.get_text() for p in document.soup.find_all("p")]
        assert texts == ["電球 (Spark)"] * 5
        assert engine.passes == 2
        engine.close()

    async def test_click_triggers_pass(self, make_engine):
        document, engine = make_engine("<main></main>")
        await engine.start()

        document.append_html(document.soup.main, "<div>Fireball</div>", notify=False)
        document.click()
        await engine.wait_idle()

        assert document.soup.div.get_text() == "火球 (Fireball)"
        engine.close()

    async def test_failing_strategy_does_not_stop_pass(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Spark</p>')
        engine.strategies.insert(0, BrokenStrategy())

        report = await engine.run_pass()

        assert report.errors == ["broken: boom"]
        assert document.soup.p.get_text() == "電球 (Spark)"

    async def test_concurrent_passes_do_not_interleave(self, make_engine):
        document, engine = make_engine('<ul><li>+25 to Life</li></ul><div>Spark</div>')

        first, second = await asyncio.gather(engine.run_pass(), engine.run_pass())

        assert first.total + second.total == 2
        assert document.soup.li.get_text() == "+25 生命"
        assert document.soup.div.get_text() == "電球 (Spark)"

    async def test_removal_triggers_harmless_pass(self, make_engine):
        document, engine = make_engine('<main><p data-test="skill-name">Spark</p><div>Fireball</div></main>')
        await engine.start()

        document.remove(document.soup.div)
        await engine.wait_idle()

        assert engine.passes == 2
        assert document.soup.p.get_text() == "電球 (Spark)"
        engine.close()

    async def test_close_stops_reacting(self, make_engine):
        document, engine = make_engine("<main></main>")
        await engine.start()
        engine.close()

        document.append_html(document.soup.main, "<div>Spark</div>")
        await asyncio.sleep(0.05)

        assert document.soup.div.get_text() == "Spark"
        assert engine.passes == 1


class TestSettings:

    def test_from_config(self):
        cfg = Config(mutation_debounce_ms=100, click_delay_ms=300, expansion_delay_ms=50)
        settings = EngineSettings.from_config(cfg)
        assert settings.mutation_debounce == pytest.approx(0.1)
        assert settings.click_delay == pytest.approx(0.3)
        assert settings.expansion_delay == pytest.approx(0.05)

    def test_report_totals(self):
        report = PassReport(kind="full")
        report.record("exact", 2)
        report.record("exact", 1)
        report.record("fallback", 0)
        assert report.total == 3
        assert report.counts == {"exact": 3, "fallback": 0}

    def test_default_profile(self, store):
        engine = AnnotationEngine(object(), store)
        assert engine.profile.list_item_selector == "ul li"
        assert [s.name for s in engine.strategies] == ["exact", "template", "substring", "tooltip", "fallback"]
