#!/usr/bin/env python3
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ["true", "1", "yes"]


@dataclass
class Config:
    """Application configuration"""
    dictionary_manifest: Path = Path(os.getenv("GLOSSA_DICTIONARY", "./dictionaries/manifest.yaml"))
    start_url: Optional[str] = os.getenv("GLOSSA_START_URL") or None
    headless: bool = _env_flag("GLOSSA_HEADLESS", "false")
    enable_debug: bool = _env_flag("GLOSSA_DEBUG", "false")
    navigation_timeout_ms: int = int(os.getenv("GLOSSA_NAVIGATION_TIMEOUT_MS", "30000"))
    page_ready_timeout_ms: int = int(os.getenv("GLOSSA_PAGE_READY_TIMEOUT_MS", "5000"))

    # Reactive re-annotation timing
    mutation_debounce_ms: int = int(os.getenv("GLOSSA_MUTATION_DEBOUNCE_MS", "200"))
    click_delay_ms: int = int(os.getenv("GLOSSA_CLICK_DELAY_MS", "300"))
    expansion_delay_ms: int = int(os.getenv("GLOSSA_EXPANSION_DELAY_MS", "100"))

    def __post_init__(self):
        self.dictionary_manifest = Path(self.dictionary_manifest)
        for name in ("mutation_debounce_ms", "click_delay_ms", "expansion_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

config = Config()
