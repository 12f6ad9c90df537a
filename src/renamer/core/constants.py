"""Core constants for renamer.

This module defines constants used throughout the application:
- Listing format markers
- Scratch-path naming used to break rename cycles
- Environment variables and configuration defaults
"""

# ============================================================================
# Listing Format
# ============================================================================

#: A listing line starting with this sigil marks its file for deletion
DELETION_SIGIL: str = "#"

#: Prefix written in front of paths that would otherwise start with the sigil
SIGIL_ESCAPE_PREFIX: str = "./"

#: Suffix for the temporary file handed to the editor
LISTING_SUFFIX: str = ".txt"

#: Prefix for the temporary file handed to the editor
LISTING_PREFIX: str = "renamer-"

# ============================================================================
# Planning
# ============================================================================

#: Name prefix for scratch paths used to break rename cycles
SCRATCH_PREFIX: str = ".renamer-"

#: Number of random scratch names tried before giving up on a cycle
SCRATCH_ATTEMPTS: int = 100

#: Length of the random token inside a scratch name
SCRATCH_TOKEN_LENGTH: int = 8

# ============================================================================
# Configuration
# ============================================================================

#: Application name, used for the per-user config directory
APP_NAME: str = "renamer"

#: Config file name inside the config directory
CONFIG_FILENAME: str = "config.toml"

#: Editor used when nothing else is configured
DEFAULT_EDITOR: str = "vim"

#: Environment variable overriding the config directory
CONFIG_DIR_ENV_VAR: str = "RENAMER_CONFIG_DIR"

#: Environment variable overriding the configured editor
EDITOR_ENV_VAR: str = "RENAMER_EDITOR"

#: Environment variable enabling debug output
DEBUG_ENV_VAR: str = "RENAMER_DEBUG"
