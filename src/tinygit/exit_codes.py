"""Exit codes for tinygit CLI commands.

Each pipeline stage that can fail terminally has its own code so scripts can
tell a bad URL apart from a network or extraction problem.
"""

# Success
SUCCESS = 0

# Errors
GENERAL_ERROR = 1
INVALID_ARGS = 2
MALFORMED_URL = 3
UNSUPPORTED_PROVIDER = 4
DOWNLOAD_FAILED = 5
EXTRACTION_FAILED = 6
SCAFFOLD_FAILED = 7
DESTINATION_EXISTS = 8
CONFIG_INVALID = 9
