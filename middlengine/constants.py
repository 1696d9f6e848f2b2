"""Shared constants for middlengine."""

PROJECT_NAME = "middlengine"
PROJECT_VERSION = "0.1.0"

# Network defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"

# Config discovery
CONFIG_ENV_VAR = "MIDDLENGINE_CONFIG"
CONFIG_SEARCH_ORDER = ("middlengine.yaml", "middlengine.yml")
CONFIG_VERSION = "1"
