"""
Dictionary Store - read-only phrase lookups

Holds the three lookup structures the annotation strategies consume:

    exact      whole phrase -> whole phrase ("Fireball" -> "火球")
    template   parameterized phrase -> parameterized phrase ("+# to Life" -> "+# 生命")
    substring  standalone word/phrase -> replacement inside larger sentences

Each structure is merged from several named sources; on key collision the
later source wins. The store is immutable once built and freely shared.

Usage:
    from glossa_core.dictionary import DictionaryStore, load_dictionary_store

    store = DictionaryStore.from_sources(exact=[others, skills], template=[templates])
    store = load_dictionary_store("dictionaries/manifest.yaml")
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import yaml

from .errors import DictionaryError

logger = logging.getLogger(__name__)

SECTIONS = ("exact", "template", "substring")


def merge_sources(sources: Iterable[Mapping[str, str]]) -> Dict[str, str]:
    """Merge mappings in order, later sources overriding earlier ones."""
    merged: Dict[str, str] = {}
    for source in sources:
        merged.update(source)
    return merged


@dataclass(frozen=True)
class DictionaryStore:
    """Immutable exact / template / substring lookups."""
    exact_map: Mapping[str, str] = field(default_factory=dict)
    template_map: Mapping[str, str] = field(default_factory=dict)
    substring_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("exact_map", "template_map", "substring_map"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @classmethod
    def from_sources(
        cls,
        exact: Iterable[Mapping[str, str]] = (),
        template: Iterable[Mapping[str, str]] = (),
        substring: Iterable[Mapping[str, str]] = (),
    ) -> "DictionaryStore":
        return cls(
            exact_map=merge_sources(exact),
            template_map=merge_sources(template),
            substring_map=merge_sources(substring),
        )

    def exact(self, text: str) -> Optional[str]:
        """Whole-phrase translation, or None on a lookup miss."""
        return self.exact_map.get(text) or None

    def substring(self, fragment: str) -> Optional[str]:
        return self.substring_map.get(fragment) or None

    @property
    def templates(self) -> Iterable[Tuple[str, str]]:
        """Template entries in declaration order."""
        return tuple(self.template_map.items())

    @property
    def substring_entries(self) -> Iterable[Tuple[str, str]]:
        return tuple((k, v) for k, v in self.substring_map.items() if k and v)

    def summary(self) -> Dict[str, int]:
        return {
            "exact": len(self.exact_map),
            "template": len(self.template_map),
            "substring": len(self.substring_map),
        }


def load_mapping(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load one dictionary source file.

    Args:
        path: JSON or YAML file holding a flat string -> string mapping

    Returns:
        The mapping, in file order

    Raises:
        DictionaryError: file missing, unparsable, or not a flat string mapping
    """
    path = Path(path)
    if not path.exists():
        raise DictionaryError(f"Dictionary source not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DictionaryError(f"Invalid dictionary source {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DictionaryError(f"Dictionary source {path} must be a mapping, got {type(data).__name__}")

    mapping: Dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise DictionaryError(f"Dictionary source {path} has a non-string entry: {key!r}")
        mapping[key] = value
    return mapping


def load_manifest(manifest_path: Union[str, Path]) -> Dict[str, Any]:
    """Read and validate a dictionary manifest, resolving source paths."""
    manifest_path = Path(manifest_path)
    if not manifest_path.exists():
        raise DictionaryError(f"Dictionary manifest not found: {manifest_path}")

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            manifest = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise DictionaryError(f"Invalid dictionary manifest {manifest_path}: {e}") from e

    if not isinstance(manifest, dict):
        raise DictionaryError(f"Dictionary manifest {manifest_path} must be a mapping")

    base = manifest_path.parent
    resolved: Dict[str, Any] = {"profile": manifest.get("profile") or {}}
    for section in SECTIONS:
        entries = manifest.get(section) or []
        if isinstance(entries, str):
            entries = [entries]
        if not isinstance(entries, list):
            raise DictionaryError(f"Manifest section '{section}' must be a list of files")
        resolved[section] = [base / entry for entry in entries]
    return resolved


def load_dictionary_store(manifest_path: Union[str, Path]) -> DictionaryStore:
    """
    Build a DictionaryStore from a YAML manifest.

    The manifest lists source files per section; sources merge in the
    listed order (last-write-wins).
    """
    manifest = load_manifest(manifest_path)
    sources = {
        section: [load_mapping(path) for path in manifest[section]]
        for section in SECTIONS
    }
    store = DictionaryStore.from_sources(**sources)
    logger.info(f"Loaded dictionaries from {manifest_path}: {store.summary()}")
    return store
