"""Platform abstraction layer."""

from .detection import Platform, detect_platform, platform_from_name
from .files import atomic_write_text, remove_path
from .process import ProcessError, run, run_silent

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "platform_from_name",
    # files
    "atomic_write_text",
    "remove_path",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
