"""
glossa_core package: bilingual phrase annotation for game pages

Usage:
    # Offline, over saved HTML
    from glossa_core import AnnotationEngine, SoupDocument, load_dictionary_store
    engine = AnnotationEngine(SoupDocument(html), load_dictionary_store("manifest.yaml"))
    await engine.run_pass()

    # Live, over a Playwright page
    from glossa_core.live import attach
    session = await attach(page, store)
"""
from .config import Config, config
from .dictionary import DictionaryStore, load_dictionary_store
from .dom import PageDocument, SoupDocument
from .engine import AnnotationEngine, EngineSettings, PassReport
from .errors import BridgeError, DictionaryError, GlossaError
from .page_profile import PageProfile, load_page_profile
from .templates import TemplateMatcher, compile_template
from .tracker import MarkKind

__version__ = "0.3.0"

__all__ = [
    # Core
    "Config",
    "config",
    "AnnotationEngine",
    "EngineSettings",
    "PassReport",
    # Dictionaries
    "DictionaryStore",
    "load_dictionary_store",
    "TemplateMatcher",
    "compile_template",
    # Documents
    "PageDocument",
    "SoupDocument",
    "PageProfile",
    "load_page_profile",
    "MarkKind",
    # Errors
    "GlossaError",
    "DictionaryError",
    "BridgeError",
]
