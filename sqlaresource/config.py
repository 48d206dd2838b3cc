# Configuration settings should be set in app.config
# The Settings class holds the defaults, the environment is consulted last
import os
from flask import current_app
from typing import Any, Optional
from .settings import Settings, log


def get_config(option: str) -> Optional[Any]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: working outside of application context
        result = getattr(Settings, option, os.environ.get(option, None))
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter holding an integer
    :return: the integer value, environment values are strings
    """
    value = get_config(option)
    try:
        return int(value)
    except (TypeError, ValueError):
        log.warning(f'Invalid integer configuration "{option}": {value}')
        return int(getattr(Settings, option))

