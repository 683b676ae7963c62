"""Common literal values used across dokapi.

These constants keep filenames, directory names, and reserved keys centralized
so the loader, generators, and tests import the same values without drifting.

Examples
--------
>>> from dokapi import _constants
>>> _constants.CONFIG_FILE
'dokapi.json'
>>> _constants.IMAGE_KEY_TEMPLATE.format(entry="setup", url="diagram.png")
'setup__diagram.png'
"""

CONFIG_FILE = "dokapi.json"
CONTENT_DIR = "content"
PACKAGE_MANIFEST = "package.json"
VENDOR_DIR = "node_modules"
DEFAULT_ANNOTATION = "dokapi"
DEFAULT_MAIN_NAME = "Introduction"
IMAGES_DIR = "images"
IMAGE_KEY_TEMPLATE = "{entry}__{url}"
ENTRY_VARIABLE_PREFIX = "entry."
GENERATED_CONTENT = "[generated]"
ZERO_WIDTH_SPACE = "\u200b"
