"""Centralized path definitions for SimpleStorage.

The application home defaults to ``~/.simple_storage`` and can be moved
with the ``SIMPLE_STORAGE_HOME`` environment variable.
"""

import os
from pathlib import Path

# Base application directory
STORAGE_HOME = Path(
    os.path.expanduser(os.getenv("SIMPLE_STORAGE_HOME", str(Path.home() / ".simple_storage")))
)

# Subdirectories
DATA_DIR = STORAGE_HOME / "data"
LOGS_DIR = STORAGE_HOME / "logs"

# Specific files
STORAGE_FILENAME = "simple_storage.sqlite"
CONFIG_PATH = STORAGE_HOME / "config.json"
