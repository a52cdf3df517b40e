"""Tests for the annotation strategies, run through full and single passes."""

import pytest

from glossa_core.dictionary import DictionaryStore
from glossa_core.strategies import (
    DisclosureRowStrategy,
    FallbackWalkStrategy,
    SubstringReplacer,
    TooltipStrategy,
    bilingual,
)
from glossa_core.tracker import MarkKind

pytestmark = pytest.mark.asyncio


class TestExactPhrase:
    """Exact phrases on the configured selector targets."""

    async def test_text_target(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Fireball</p>')

        report = await engine.run_pass()

        assert document.soup.p.get_text() == "火球 (Fireball)"
        assert report.counts["exact"] == 1
        assert report.counts["fallback"] == 0

    async def test_repeated_passes_are_idempotent(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Fireball</p>')

        await engine.run_pass()
        second = await engine.run_pass()
        third = await engine.run_pass()

        assert document.soup.p.get_text() == "火球 (Fireball)"
        assert second.total == 0
        assert third.total == 0

    async def test_child_elements_survive(self, make_engine):
        document, engine = make_engine(
            '<p data-test="skill-name">Fireball<img src="fire.png"/></p>'
        )

        await engine.run_pass()

        assert document.soup.p.img is not None
        assert document.soup.p.get_text() == "火球 (Fireball)"

    async def test_tooltip_paragraph(self, make_engine):
        document, engine = make_engine('<div data-tippy-root=""><p>Spark</p></div>')

        report = await engine.run_pass()

        assert document.soup.p.get_text() == "電球 (Spark)"
        assert report.counts["exact"] == 1

    async def test_attribute_target(self, make_engine):
        document, engine = make_engine('<img alt="Fireball" src="fire.png"/>')

        await engine.run_pass()
        await engine.run_pass()

        assert document.soup.img["alt"] == "火球 (Fireball)"

    async def test_unknown_phrase_untouched(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Meteor</p>')

        report = await engine.run_pass()

        assert document.soup.p.get_text() == "Meteor"
        assert report.total == 0

    async def test_unannotated_element_is_not_marked(self, make_engine):
        document, engine = make_engine('<p data-test="skill-name">Meteor</p>')

        await engine.run_pass()

        assert not await document.is_marked(document.soup.p, MarkKind.ELEMENT)


class TestListItemTemplate:
    """Numeric templates on list items."""

    async def test_template_and_fallback_items(self, make_engine):
        document, engine = make_engine("<ul><li>+25 to Life</li><li>Spark</li></ul>")

        report = await engine.run_pass()

        items = [li.get_text() for li in document.soup.find_all("li")]
        assert items == ["+25 生命", "電球 (Spark)"]
        assert report.counts["template"] == 1
        assert report.counts["fallback"] == 1

    async def test_rewritten_item_not_touched_again(self, make_engine):
        document, engine = make_engine("<ul><li>Adds 1 to 2 Fire Damage</li></ul>")

        await engine.run_pass()
        second = await engine.run_pass()

        assert document.soup.li.get_text() == "附加 1 至 2 火焰傷害"
        assert second.total == 0


class TestSubstring:
    """Whole-word replacement inside sentences."""

    async def test_whole_words_only(self, make_engine):
        document, engine = make_engine("<p>Requires Str 10</p><p>Strength 10</p>")

        await engine.run_pass()

        texts = [p.get_text() for p in document.soup.find_all("p")]
        assert texts == ["需求 力量 10", "Strength 10"]

    async def test_nested_inline_text_replaced(self, make_engine):
        document, engine = make_engine("<p>Requires <strong>Str</strong> 10</p><p>Requires <b>Dex</b> and Str</p>")

        report = await engine.run_pass()

        first, second = document.soup.find_all("p")
        assert str(first) == "<p>需求 <strong>力量</strong> 10</p>"
        assert str(second) == "<p>需求 <b>敏捷</b> and 力量</p>"
        assert report.counts["substring"] == 5

    async def test_nested_eligible_element_processed_once(self, make_engine):
        document, engine = make_engine("<p>Requires <span>Str and Dex</span></p>")

        report = await engine.run_pass()
        second = await engine.run_pass()

        assert document.soup.p.get_text() == "需求 力量 and 敏捷"
        assert report.counts["substring"] == 2
        assert second.total == 0

    async def test_nested_exact_phrase_left_for_exact_forms(self, make_engine):
        store = DictionaryStore.from_sources(
            exact=[{"Fireball": "火球"}],
            substring=[{"Fireball": "FB", "Cast": "施放"}],
        )
        document, engine = make_engine("<p>Cast <b>Fireball</b> now</p>", store=store)

        await engine.run_pass()

        assert str(document.soup.p) == "<p>施放 <b>火球 (Fireball)</b> now</p>"

    async def test_exact_phrase_beats_substring(self, make_engine):
        store = DictionaryStore.from_sources(
            exact=[{"Fireball": "火球"}],
            substring=[{"Fireball": "FB"}],
        )
        document, engine = make_engine("<p>Fireball</p><p>Cast Fireball now</p>", store=store)

        await engine.run_pass()

        texts = [p.get_text() for p in document.soup.find_all("p")]
        assert texts == ["火球 (Fireball)", "Cast FB now"]

    async def test_replacer_treats_replacement_literally(self):
        replacer = SubstringReplacer([("Str", r"\1 力量")])
        assert replacer.replace("Str 10") == (r"\1 力量 10", 1)

    async def test_replacer_boundary_next_to_cjk(self):
        replacer = SubstringReplacer([("Str", "力量")])
        assert replacer.replace("Str 10") == ("力量 10", 1)
        assert replacer.replace("需求Str") == ("需求力量", 1)
        assert replacer.replace("Strength") == ("Strength", 0)


class TestTooltip:
    """Floating tooltip layer."""

    async def test_exact_and_substring_whole_text(self, make_engine):
        document, engine = make_engine(
            '<div data-tippy-root=""><div>Frost Bolt</div><div>Dex</div></div>'
        )

        report = await engine.run_pass()

        inner = document.soup.select("[data-tippy-root] div")
        assert [d.get_text() for d in inner] == ["冰霜彈 (Frost Bolt)", "敏捷"]
        assert report.counts["tooltip"] == 2

    async def test_detached_inner_element_skipped(self, make_engine):
        document, engine = make_engine(
            '<div data-tippy-root=""><div><span>Spark</span></div></div>'
        )

        count = await TooltipStrategy().apply(engine.context)

        assert count == 1
        assert str(document.soup.select_one("[data-tippy-root]")) == (
            '<div data-tippy-root=""><div>電球 (Spark)</div></div>'
        )


class TestEditorExclusion:
    """Embedded rich-text editors are never modified."""

    async def test_editor_regions_untouched(self, make_engine):
        markup = (
            '<div contenteditable="true">'
            '<p data-test="skill-name">Fireball</p>'
            '<ul><li>+25 to Life</li></ul>'
            '<p>Requires Str</p>'
            '</div>'
            '<div data-lexical-editor="true"><span>Spark</span></div>'
            '<span data-lexical-text="true">Fireball</span>'
        )
        document, engine = make_engine(markup)
        before = document.html()

        report = await engine.run_pass()

        assert document.html() == before
        assert report.total == 0


class TestFallbackWalk:
    """Exhaustive text-node walk."""

    async def test_annotates_anywhere(self, make_engine):
        document, engine = make_engine("<section><div><div>Spark</div></div></section>")

        report = await engine.run_pass()

        assert document.soup.section.get_text() == "電球 (Spark)"
        assert report.counts["fallback"] == 1

    async def test_skips_marked_text_nodes(self, make_engine):
        document, engine = make_engine("<div>Spark</div>")
        await document.mark(document.soup.div.string, MarkKind.TEXT)

        count = await FallbackWalkStrategy().apply(engine.context)

        assert count == 0
        assert document.soup.div.get_text() == "Spark"

    async def test_scoped_to_root(self, make_engine):
        document, engine = make_engine(
            '<section id="a"><div>Spark</div></section><section id="b"><div>Fireball</div></section>'
        )
        root = document.soup.select_one("#a")

        await FallbackWalkStrategy().apply(engine.context, root=root)

        assert document.soup.select_one("#a").get_text() == "電球 (Spark)"
        assert document.soup.select_one("#b").get_text() == "Fireball"

    async def test_ignores_script_text(self, make_engine):
        document, engine = make_engine("<div>Spark<script>Spark</script></div>")

        await engine.run_pass()

        assert document.soup.script.string == "Spark"


class TestDisclosureRows:
    """Rows revealed by a disclosure widget."""

    ROW = (
        '<section><div class="row">'
        '<img src="SupportGem_Fire.png" width="40"/><span>Spark</span>'
        '</div></section>'
    )

    async def test_label_rendered_on_two_lines(self, make_engine):
        document, engine = make_engine(self.ROW)

        count = await DisclosureRowStrategy().apply(engine.context)

        assert count == 1
        assert str(document.soup.span) == "<span>電球<br/>(Spark)</span>"

    async def test_label_annotated_once(self, make_engine):
        document, engine = make_engine(self.ROW)
        strategy = DisclosureRowStrategy()

        await strategy.apply(engine.context)
        second = await strategy.apply(engine.context)

        assert second == 0
        assert str(document.soup.span) == "<span>電球<br/>(Spark)</span>"

    async def test_rendered_lines_marked_as_text(self, make_engine):
        document, engine = make_engine(self.ROW)

        await DisclosureRowStrategy().apply(engine.context)

        lines = [node for node in document.soup.span.contents if isinstance(node, str)]
        assert lines == ["電球", "(Spark)"]
        assert [await document.is_marked(line, MarkKind.TEXT) for line in lines] == [True, True]
        assert await FallbackWalkStrategy().apply(engine.context) == 0

    async def test_unknown_label_skipped(self, make_engine):
        document, engine = make_engine(
            '<div><img width="40" src="x.png"/><span>Meteor</span></div>'
        )

        assert await DisclosureRowStrategy().apply(engine.context) == 0
        assert str(document.soup.span) == "<span>Meteor</span>"


class TestNoDoubleAnnotation:

    async def test_passes_after_new_content(self, make_engine):
        document, engine = make_engine('<main><p data-test="skill-name">Fireball</p></main>')

        await engine.run_pass()
        document.append_html(document.soup.main, '<p data-test="skill-name">Fireball</p>', notify=False)
        await engine.run_pass()
        await engine.run_pass()

        texts = [p.get_text() for p in document.soup.find_all("p")]
        assert texts == ["火球 (Fireball)", "火球 (Fireball)"]
        assert "(Fireball) (Fireball)" not in document.html()

    async def test_bilingual_format(self):
        assert bilingual("火球", "Fireball") == "火球 (Fireball)"
