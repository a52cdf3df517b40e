"""
Live page support: bridge, readiness wait and the long-running session.
"""

from .bridge import BRIDGE_SCRIPT, LiveDocument, LiveNode
from .page_ready import ensure_page_ready, wait_for_render_settled
from .session import LiveSession, attach

__all__ = [
    'BRIDGE_SCRIPT',
    'LiveDocument',
    'LiveNode',
    'ensure_page_ready',
    'wait_for_render_settled',
    'LiveSession',
    'attach',
]
