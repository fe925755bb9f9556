"""Core domain types and logic."""

from .config import Config, ConfigError, load_config
from .errors import ConfigureError, ErrorCode
from .flags import BuildProfile, FlagSet, PythonVariant
from .layout import Layout, detect_root
from .result import Err, Ok, Result, is_err, is_ok
from .state import PersistedState, read_persisted_state

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    # errors
    "ConfigureError",
    "ErrorCode",
    # flags
    "BuildProfile",
    "FlagSet",
    "PythonVariant",
    # layout
    "Layout",
    "detect_root",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # state
    "PersistedState",
    "read_persisted_state",
]
