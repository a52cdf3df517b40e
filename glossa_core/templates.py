"""
Template Compiler - numeric phrase templates to regex matchers

A template is a fixed skeleton with `#` placeholders standing for a
numeric quantity:

    "+# to Life"                      -> "+# 生命"
    "Adds # to # Fire Damage"         -> "附加 # - # 火焰傷害"

Each placeholder captures a numeric-looking token (digits, '.', '-', and
parentheses so ranges such as "(1-2)" survive). The pattern is anchored
and prefixed with an optional sign capture, so "+12% increased X" and
"-5 to Y" match their unsigned templates and keep their sign.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER = "#"
NUMBER_GROUP = r"([\d.\-()]+)"
SIGN_GROUP = r"^([+\-]?)"


@dataclass(frozen=True)
class TemplateMatcher:
    template: str
    translation: str
    pattern: Pattern[str]
    capture_groups: Tuple[int, ...]

    @property
    def is_literal(self) -> bool:
        """True when the template had no placeholder and only matches itself."""
        return not self.capture_groups

    def apply(self, text: str) -> Optional[str]:
        """
        Reconstruct the translation for `text`.

        Returns:
            The translated text with captured numbers substituted in
            order and the leading sign re-prepended, or None when the
            pattern does not match.
        """
        match = self.pattern.match(text)
        if not match:
            return None
        result = self.translation
        for group in self.capture_groups:
            result = result.replace(PLACEHOLDER, match.group(group), 1)
        return (match.group(1) or "") + result


def build_pattern(template: str) -> str:
    pieces = [re.escape(piece) for piece in template.split(PLACEHOLDER)]
    return SIGN_GROUP + NUMBER_GROUP.join(pieces) + "$"


def compile_template(template: str, translation: str) -> TemplateMatcher:
    """Compile one template entry; never raises."""
    placeholders = template.count(PLACEHOLDER)
    try:
        pattern = re.compile(build_pattern(template), re.IGNORECASE)
    except re.error as e:
        logger.warning(f"Template {template!r} did not compile ({e}); matching it literally")
        pattern = re.compile(SIGN_GROUP + re.escape(template) + "$", re.IGNORECASE)
        placeholders = 0
    # group 1 is the sign, placeholders follow in order
    return TemplateMatcher(
        template=template,
        translation=translation,
        pattern=pattern,
        capture_groups=tuple(range(2, 2 + placeholders)),
    )


def compile_templates(entries: Iterable[Tuple[str, str]]) -> List[TemplateMatcher]:
    matchers = [compile_template(tpl, trans) for tpl, trans in entries if tpl and trans]
    literal = sum(1 for m in matchers if m.is_literal)
    if literal:
        logger.debug(f"{literal} template(s) without placeholders match literally")
    return matchers


def match_first(matchers: Iterable[TemplateMatcher], text: str) -> Optional[str]:
    """First matcher in declaration order wins; no best-match ranking."""
    for matcher in matchers:
        result = matcher.apply(text)
        if result is not None:
            return result
    return None
