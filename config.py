"""
Runtime configuration for the crash odds predictor.

Values come from the environment (a local ``.env`` file is loaded first) and
fall back to the defaults below. The same thresholds drive the prediction
engine, the verification rounds and the history retention cap.

Usage:
    from config import Config

    config = Config.from_env()
    print(config.min_odds)  # 1.5
"""
import logging
import os
import sys
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

from errors import ConfigurationError

# Maps each field to the environment variable that overrides it
ENV_VARS = {
    'min_odds': 'MIN_ODDS',
    'min_probability': 'MIN_PROBABILITY',
    'safe_probability': 'SAFE_PROBABILITY',
    'max_rounds': 'MAX_ROUNDS',
    'required_coefficients': 'REQUIRED_COEFFICIENTS',
    'history_limit': 'HISTORY_LIMIT',
    'source_url': 'ODDS_SOURCE_URL',
    'source_customer_id': 'ODDS_SOURCE_CUSTOMER_ID',
    'source_session_id': 'ODDS_SOURCE_SESSION_ID',
    'source_timeout': 'ODDS_SOURCE_TIMEOUT',
    'log_level': 'LOG_LEVEL',
    'port': 'PORT',
}


@dataclass
class Config:
    # Quality gate
    min_odds: float = 1.50
    min_probability: float = 70.0
    safe_probability: float = 90.0

    # Verification
    max_rounds: int = 5

    # Input / retention
    required_coefficients: int = 5
    history_limit: int = 100

    # Upstream coefficient feed (disabled while source_url is empty)
    source_url: str = ''
    source_customer_id: str = ''
    source_session_id: str = ''
    source_timeout: float = 10.0

    log_level: str = 'INFO'
    port: int = 3000

    @classmethod
    def from_env(cls, env=None, dotenv_path: Optional[str] = None) -> 'Config':
        """Build a config from ``env`` (defaults to ``os.environ`` after loading .env)."""
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        values = {}
        for f in fields(cls):
            raw = env.get(ENV_VARS[f.name])
            if raw is None or raw == '':
                continue
            values[f.name] = _coerce(f.name, f.type, raw)

        config = cls(**values)
        config.validate()
        return config

    def validate(self):
        if self.required_coefficients < 1:
            raise ConfigurationError('required_coefficients', 'must be at least 1')
        if self.max_rounds < 1:
            raise ConfigurationError('max_rounds', 'must be at least 1')
        if self.history_limit < 1:
            raise ConfigurationError('history_limit', 'must be at least 1')


def _coerce(name, type_, raw):
    if type_ in (str, 'str'):
        return raw
    try:
        if type_ in (int, 'int'):
            return int(raw)
        return float(raw)
    except ValueError:
        raise ConfigurationError(name, f"expected a number, got {raw!r}")


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """Configure root logging once for the service."""
    if format_string is None:
        format_string = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=format_string,
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True
    )
