"""
Utility modules for configuration and logging
"""

from .config import ConfigManager, merge_config
from .structured_logging import ReconLogger, configure_structured_logging, operation_timer

__all__ = [
    'ConfigManager',
    'merge_config',
    'ReconLogger',
    'configure_structured_logging',
    'operation_timer'
]
