"""permission-translation constants: integer width, config layout, env vars."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Integer width
# ---------------------------------------------------------------------------

PERMISSION_BITS = 64
MAX_PERMISSION_VALUE = (1 << PERMISSION_BITS) - 1

# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "permissions.toml"
CURRENT_CONFIG_VERSION = 1

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

ENV_CONFIG_PATH = "PERMISSION_TRANSLATION_CONFIG"
ENV_LOG_LEVEL = "PERMISSION_TRANSLATION_LOG_LEVEL"
ENV_LOG_FORMAT = "PERMISSION_TRANSLATION_LOG_FORMAT"
