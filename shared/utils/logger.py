"""
Logging utilities for ReadIt

Provides centralized logging configuration and utilities.
"""

import os
import copy
import logging
import logging.config
from typing import Optional, Dict, Any
import yaml

# Default logging configuration
DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'json': {
            'format': '{"timestamp": "%(asctime)s", "logger": "%(name)s", "level": "%(levelname)s", "module": "%(module)s", "function": "%(funcName)s", "line": %(lineno)d, "message": "%(message)s"}',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'default',
            'stream': 'ext://sys.stdout'
        }
    },
    'loggers': {
        'app': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        },
        'shared': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        },
        'strawberry': {
            'level': 'ERROR',
            'handlers': ['console'],
            'propagate': False
        }
    }
}


def load_logging_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a logging dictConfig from a YAML file, falling back to the default

    Args:
        config_path: Path to a YAML logging configuration file

    Returns:
        dict: Logging configuration suitable for logging.config.dictConfig
    """
    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
            if isinstance(config, dict):
                return config
            print(f"Ignoring logging config {config_path}: not a mapping")
        except (OSError, yaml.YAMLError) as e:
            print(f"Failed to load logging config from {config_path}: {e}")

    return copy.deepcopy(DEFAULT_LOGGING_CONFIG)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None
) -> Dict[str, Any]:
    """
    Setup logging configuration

    Args:
        config_path: Path to logging configuration file
        log_level: Override log level
        log_format: Override log format ('default', 'detailed', 'json')

    Returns:
        dict: The configuration that was applied
    """
    config = load_logging_config(config_path)

    # Apply environment-specific overrides
    environment = os.getenv('ENVIRONMENT', 'development')
    env_config = config.pop(environment, None)
    if isinstance(env_config, dict):
        config.setdefault('handlers', {}).update(env_config.get('handlers', {}))
        config.setdefault('loggers', {}).update(env_config.get('loggers', {}))

    # Override log level if specified
    if log_level:
        log_level = log_level.upper()
        for name, logger_config in config.get('loggers', {}).items():
            if name != 'strawberry':
                logger_config['level'] = log_level
        for handler_config in config.get('handlers', {}).values():
            handler_config['level'] = log_level

    # Override log format if specified
    if log_format and log_format in config.get('formatters', {}):
        for handler_config in config.get('handlers', {}).values():
            handler_config['formatter'] = log_format

    try:
        logging.config.dictConfig(config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        print(f"Failed to configure logging: {e}")
        # Fallback to basic configuration
        logging.basicConfig(
            level=getattr(logging, log_level or 'INFO', logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    logging.getLogger(__name__).info(f"Logging configured for environment: {environment}")
    return config


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def init_logging() -> Dict[str, Any]:
    """Initialize logging with environment variables"""
    config_path = os.getenv('LOGGING_CONFIG_PATH')
    log_level = os.getenv('LOG_LEVEL', 'INFO')
    log_format = os.getenv('LOG_FORMAT', 'default')

    return setup_logging(config_path, log_level, log_format)
