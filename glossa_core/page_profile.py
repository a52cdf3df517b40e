"""
Page profile - every page-specific selector in one place.

Defaults describe the build-planner page glossa was written for; a
dictionary manifest may override any of them under its `profile:` key.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

from .dictionary import load_manifest
from .errors import DictionaryError
from .selectors import AnnotationTarget, SelectorGroup


DEFAULT_TARGETS: Tuple[AnnotationTarget, ...] = (
    AnnotationTarget(SelectorGroup.of('[data-tippy-root] p', '[data-tippy-root] span')),
    AnnotationTarget(SelectorGroup.of('p[data-test="skill-name"]')),
    AnnotationTarget(SelectorGroup.of('img[alt]', 'img.skill-icon'), attribute='alt'),
)

# Foreign rich-text editors embedded in the page; never touched.
EDITOR_SELECTOR = (
    '[data-lexical-editor], [data-lexical-decorator], '
    '[data-lexical-text="true"], [contenteditable="true"]'
)


@dataclass(frozen=True)
class PageProfile:
    targets: Tuple[AnnotationTarget, ...] = DEFAULT_TARGETS
    list_item_selector: str = 'ul li'
    substring_selector: str = 'p, span, li'
    tooltip_selector: str = '[data-tippy-root] span, [data-tippy-root] div'
    editor_selector: str = EDITOR_SELECTOR

    # Disclosure widgets: icon flips to the "expanded" artwork
    disclosure_icon_selector: str = 'img[src*="triangle-"], span[style*="triangle-"]'
    disclosure_attributes: Tuple[str, ...] = ('src', 'style')
    expanded_marker: str = 'triangle-up.svg'
    region_selector: str = 'section'

    # Rows revealed by a disclosure: icon + label
    row_icon_selector: str = 'img[width="40"], img[height="40"], img[src*="SupportGem"]'
    row_selector: str = 'div'
    row_label_selector: str = 'div, span, p'

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], base: Optional["PageProfile"] = None) -> "PageProfile":
        """Override `base` (or the defaults) with the keys present in `data`."""
        profile = base or cls()
        if not data:
            return profile

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise DictionaryError(f"Unknown page profile key(s): {', '.join(unknown)}")

        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "targets":
                overrides[key] = tuple(AnnotationTarget.from_dict(t) for t in value or [])
            elif key == "disclosure_attributes":
                overrides[key] = tuple(value if isinstance(value, (list, tuple)) else [value])
            else:
                if not isinstance(value, str):
                    raise DictionaryError(f"Page profile key '{key}' must be a string")
                overrides[key] = value
        return replace(profile, **overrides)


def load_page_profile(manifest_path) -> PageProfile:
    """PageProfile with the overrides from a manifest's `profile:` section."""
    overrides = load_manifest(manifest_path)["profile"]
    if not isinstance(overrides, dict):
        raise DictionaryError(f"Page profile in {manifest_path} must be a mapping")
    return PageProfile.from_dict(overrides)
