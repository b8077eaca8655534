"""Sender settings: request timeout and retry policy, optionally read from a JSON file."""

import json
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from common.logging_config import get_logger
from sender.exceptions import ConfigError

logger = get_logger(__name__)


@dataclass
class SenderSettings:
    """
    How the sender talks to a receiver.

    The receiver address always comes from the command line; only request
    behaviour is configurable.
    """
    timeout: float = 30.0
    max_retries: int = 0
    retry_backoff_multiplier: float = 2.0

    def __post_init__(self):
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigError(f"timeout must be a positive number, got {self.timeout!r}")
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int) or self.max_retries < 0:
            raise ConfigError(f"max_retries must be a non-negative integer, got {self.max_retries!r}")
        if (isinstance(self.retry_backoff_multiplier, bool)
                or not isinstance(self.retry_backoff_multiplier, (int, float))
                or self.retry_backoff_multiplier < 1):
            raise ConfigError(
                f"retry_backoff_multiplier must be a number >= 1, got {self.retry_backoff_multiplier!r}"
            )


def load_settings(config_path: Optional[Union[str, Path]] = None) -> SenderSettings:
    """
    Build sender settings, overlaying a JSON config file on the defaults.

    Nothing is read or written when no path is given. A file that is not
    valid JSON is copied to '<name>.bak' and the defaults are used, so a
    hand-edit gone wrong never blocks a transfer.

    Args:
        config_path: Optional path to a JSON object with any of the
            SenderSettings field names

    Returns:
        SenderSettings

    Raises:
        ConfigError: If the file is missing, is not a JSON object, or holds
            an out-of-range value
    """
    if config_path is None:
        return SenderSettings()

    path = Path(config_path)
    try:
        with open(path, 'r') as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        backup_path = path.with_name(path.name + '.bak')
        logger.warning(f"Unreadable config {path} ({e}); copied to {backup_path}, using defaults")
        shutil.copy(path, backup_path)
        return SenderSettings()

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")

    known = {f.name for f in fields(SenderSettings)}
    ignored = sorted(set(raw) - known)
    if ignored:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(ignored)}")

    settings = SenderSettings(**{key: value for key, value in raw.items() if key in known})
    logger.debug(f"Loaded sender settings from {path}: {settings}")
    return settings
