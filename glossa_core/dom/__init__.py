"""
Document adapters the engine reads and writes through.
"""

from .base import PageDocument
from .soup import SoupDocument

__all__ = ['PageDocument', 'SoupDocument']
