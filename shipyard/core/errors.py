"""Process exit codes.

A failed pipeline run is reported to the hosting CI as a non-zero exit status.
The code tells which stage failed; the values are part of the CLI contract.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad input, not a release trigger)
    - 2: Environment error (missing gh/cargo, no auth, bad config)
    - 3: Build error (precondition, fetch, compile, rename, gate stage failed)
    - 4: Network error (gh unreachable)
    - 5: I/O error (store or download directory unusable)
    - 6: Publish error (release rejected, bundle incomplete)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    PUBLISH_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
