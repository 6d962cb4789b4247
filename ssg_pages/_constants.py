"""Common literal values used across ssg_pages.

These constants keep directory names, environment variable names and
defaults centralized so the build pipeline, bundler, and tests import the same
values without drifting.

Examples
--------
>>> from ssg_pages import _constants
>>> _constants.TEMP_DIR_NAME
'.vite-ssg-temp'
>>> _constants.SIZE_TEMPLATE.format(size=2048 / 1024)
'2.00 KiB'
"""

TEMP_DIR_NAME = ".vite-ssg-temp"
SSG_PASS_ENV = "VITE_SSG"
NODE_ENV = "NODE_ENV"
MODE_ENV = "MODE"
DEFAULT_NODE_ENV = "production"
SIZE_TEMPLATE = "{size:.2f} KiB"
