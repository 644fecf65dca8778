"""
Configuration loader for the grading service.

Handles loading and validating config.json, and sets up logging from it.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .models import JudgeConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] - %(levelname)s - %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def load_config(config_path: Optional[Path] = None) -> JudgeConfig:
    """
    Load service configuration from a JSON file.

    Args:
        config_path: Path to the configuration file. If None, looks for
                    'config.json' next to the package.

    Returns:
        JudgeConfig object with validated configuration

    Raises:
        ValueError: If config is invalid
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config.json"
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning("Config file '%s' not found. Using default configuration.", config_path)
        return JudgeConfig.default()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ValueError(f"Error reading config file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Invalid configuration: top level must be an object")

    try:
        config = JudgeConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid configuration: {e}")

    is_valid, error_message = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid configuration: {error_message}")

    return config


def configure_logging(config: JudgeConfig) -> None:
    """Send logs to stderr and, if configured, append them to log_path."""
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if config.log_path:
        Path(config.log_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_path, encoding='utf-8'))

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(config.log_level)


def create_sample_config(output_path: Path):
    """
    Create a sample configuration file.

    Args:
        output_path: Path where to save the sample config
    """
    sample_config = {
        "default_time_limit_ms": 5000,
        "default_memory_limit_mb": 128,
        "node_path": None,
        "bank_path": "banks/sample_bank.json",
        "stats_path": "data/stats.json",
        "host": "127.0.0.1",
        "port": 8000,
        "log_path": "logs/codejudge.log",
        "log_level": "INFO",
        "_instructions": {
            "default_time_limit_ms": "Timeout for questions without time_limit_ms",
            "default_memory_limit_mb": "Heap ceiling for questions without memory_limit_mb",
            "node_path": "Node.js executable; null searches PATH",
            "bank_path": "Question bank (.json or encrypted .enc)",
            "stats_path": "Where running question statistics are saved; null keeps them in memory",
            "host": "Address the HTTP API binds to",
            "port": "Port the HTTP API listens on",
            "log_path": "Log file in addition to stderr; null disables it",
            "log_level": "DEBUG, INFO, WARNING, ERROR or CRITICAL"
        }
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(sample_config, f, indent=2)

    logger.info("Sample configuration created at: %s", output_path)
