"""Theme configuration for Rich console output.

This module defines colors, icons, and the Rich theme used for health
results.
"""

from rich.theme import Theme

# Health status color mappings
STATUS_COLORS = {
    'healthy': 'green',
    'warning': 'yellow',
    'error': 'bold red',
}

# Human labels for health statuses
STATUS_LABELS = {
    'healthy': 'Healthy',
    'warning': 'Attention',
    'error': 'Unhealthy',
}

ICONS = {
    'healthy': '✓',
    'warning': '⚠',
    'error': '✗',
    'info': 'ℹ',
    'time': '⏱',
    'domain': '🌐',
}


def get_theme() -> Theme:
    """Get the Rich theme with custom styles.
    
    Returns:
        Theme: Rich Theme object with custom style definitions
    """
    return Theme({
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "domain": "bold cyan",
        "timestamp": "dim",
        "metric": "blue"
    })
