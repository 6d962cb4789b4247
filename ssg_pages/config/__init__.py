"""Load and validate build configuration for ssg_pages runs.

This subpackage parses the host ``ssg.yaml`` file, merges caller-supplied
options over its ``ssg_options`` block, resolves hook import strings, and
produces frozen dataclasses (:class:`BuildOptions`, :class:`EntrySpec`) that
the build pipeline consumes.

Examples
--------
>>> from ssg_pages.config import build_options, merge_options
>>> options = build_options(merge_options({"script": "defer"}, {"mock": True}))
>>> (options.script, options.mock)
('defer', True)
"""

from .helpers import build_options, merge_options, resolve_hook
from .loader import find_config_file, load_host_config
from .models import (
    SCRIPT_CHOICES,
    BuildOptions,
    ConfigurationError,
    EntrySpec,
    HostConfig,
    ScriptMode,
)

__all__ = [
    "SCRIPT_CHOICES",
    "BuildOptions",
    "ConfigurationError",
    "EntrySpec",
    "HostConfig",
    "ScriptMode",
    "build_options",
    "find_config_file",
    "load_host_config",
    "merge_options",
    "resolve_hook",
]
