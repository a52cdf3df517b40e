"""
Shared fixtures for the unit tests.

Unit tests run the engine over SoupDocument; page activity (content
arriving, icons flipping, clicks) is simulated through its helpers.
"""

import pytest

from glossa_core.dictionary import DictionaryStore
from glossa_core.dom import SoupDocument
from glossa_core.engine import AnnotationEngine, EngineSettings

FAST = EngineSettings(mutation_debounce=0.01, click_delay=0.01, expansion_delay=0.01)


@pytest.fixture
def store():
    return DictionaryStore.from_sources(
        exact=[
            {"Fireball": "火球", "Spark": "電球", "Strength": "力量"},
            {"Frost Bolt": "冰霜彈"},
        ],
        template=[{
            "+# to Life": "+# 生命",
            "Adds # to # Fire Damage": "附加 # 至 # 火焰傷害",
        }],
        substring=[{"Str": "力量", "Dex": "敏捷", "Requires": "需求"}],
    )


@pytest.fixture
def make_engine(store):
    """Build (document, engine) over the given markup with fast timings."""
    def factory(markup, **kwargs):
        document = SoupDocument(markup)
        kwargs.setdefault("settings", FAST)
        return document, AnnotationEngine(document, kwargs.pop("store", store), **kwargs)
    return factory


@pytest.fixture
def manifest(tmp_path):
    """A small manifest on disk with one source per section."""
    (tmp_path / "skills.json").write_text('{"Fireball": "火球", "Spark": "電球"}', encoding="utf-8")
    (tmp_path / "templates.yaml").write_text('"+# to Life": "+# 生命"\n"Cannot be Frozen": "無法被冰凍"\n', encoding="utf-8")
    (tmp_path / "fixed.json").write_text('{"Str": "力量"}', encoding="utf-8")
    path = tmp_path / "manifest.yaml"
    path.write_text(
        "exact:\n  - skills.json\n"
        "template:\n  - templates.yaml\n"
        "substring:\n  - fixed.json\n",
        encoding="utf-8",
    )
    return path
