"""
Configuration utilities
"""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading"""

    def __init__(self, config_dir: str = "config"):
        self.config_dir = Path(config_dir)

    def load_config(self, config_type: str) -> Dict[str, Any]:
        """Load configuration of specified type"""
        try:
            # Try local overrides first, then fall back to the shipped file
            local_file = self.config_dir / f"{config_type}_local.yml"
            template_file = self.config_dir / f"{config_type}.yml"

            config_file = local_file if local_file.exists() else template_file

            if not config_file.exists():
                logger.warning(f"Config file not found: {config_file}, using defaults")
                return {}

            with open(config_file, 'r') as f:
                config = yaml.safe_load(f) or {}

            logger.info(f"Loaded config from {config_file}")
            return config

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config {config_type}: {e}")
            return {}

    def get_recon_config(self) -> Dict[str, Any]:
        """Get reconciliation configuration"""
        return self.load_config("recon")


def merge_config(defaults: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Deep-merge overrides into a copy of defaults

    Args:
        defaults: Default configuration
        overrides: Partial configuration, may be None

    Returns:
        New merged configuration dict
    """
    merged = copy.deepcopy(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
