"""
Rich console output package for domain health reports.
"""

from .output import ConsoleManager
from .themes import get_theme, STATUS_COLORS, STATUS_LABELS, ICONS

__all__ = [
    'ConsoleManager',
    'get_theme',
    'STATUS_COLORS',
    'STATUS_LABELS',
    'ICONS',
]
