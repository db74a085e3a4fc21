"""Process exit codes for forkrel commands."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are part of the scripting contract and should remain stable:
    - 0: Success
    - 1: User error (invalid version, malformed tag, bad config)
    - 2: Environment error (gh missing, dirty working tree)
    - 3: Build error (build or pack command failed)
    - 4: Network error (push or release creation failed)
    - 5: I/O error (manifest or notes could not be read/written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
