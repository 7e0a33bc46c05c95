"""Exit codes for AgentX CLI commands.

All commands use the same codes so scripts can branch on failure class.
"""

# Success
SUCCESS = 0

# Errors
GENERAL_ERROR = 1
INVALID_ARGS = 2
INVALID_SOURCE = 3
UNIT_NOT_FOUND = 4
UNIT_INVALID = 5
ALREADY_EXISTS = 6
GIT_ERROR = 7
REGISTRY_ERROR = 8
