"""
Matching strategies, in the order a full pass runs them.
"""

from .base import AnnotationContext, AnnotationStrategy, bilingual
from .exact import ExactPhraseStrategy
from .template import ListItemTemplateStrategy
from .substring import SubstringReplacer, SubstringStrategy
from .tooltip import TooltipStrategy
from .fallback import FallbackWalkStrategy
from .disclosure import DisclosureRowStrategy

__all__ = [
    'AnnotationContext',
    'AnnotationStrategy',
    'bilingual',
    'ExactPhraseStrategy',
    'ListItemTemplateStrategy',
    'SubstringReplacer',
    'SubstringStrategy',
    'TooltipStrategy',
    'FallbackWalkStrategy',
    'DisclosureRowStrategy',
]
