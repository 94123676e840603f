"""
Interactive surface support

Hash-based routing and access to pre-generated summaries for the rules documentation UI.
"""

from .router import NOT_FOUND, ROUTES, document_route, get_route, get_url
from .summaries import SummaryRepository

__all__ = [
    'NOT_FOUND',
    'ROUTES',
    'SummaryRepository',
    'document_route',
    'get_route',
    'get_url'
]
