import os
from typing import Optional

import yaml
from pydantic import ValidationError

from fm_smt.errors import ConfigError
from fm_smt.types import EncoderSettings
from fm_smt.utils.logger import configure_logging


def load_settings(path: Optional[str] = None) -> EncoderSettings:
    """
    Read encoder settings from YAML and apply their log level.

    No path or an empty file gives the defaults.
    """
    if path is None:
        return EncoderSettings()
    if not os.path.exists(path):
        raise ConfigError(f"Settings file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            cfg = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {path}: {e}") from e
    if cfg is None:
        return EncoderSettings()
    if not isinstance(cfg, dict):
        raise ConfigError(f"Settings in {path} must be a mapping, got {type(cfg).__name__}")
    try:
        settings = EncoderSettings.model_validate(cfg)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e
    configure_logging(settings.log_level)
    return settings
