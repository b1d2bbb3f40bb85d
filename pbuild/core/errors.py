"""Process exit codes.

Every failure surfaced by the CLI maps to one of these codes so that CI
systems can tell a broken build from a broken invocation.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for pbuild commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (unknown target, bad option)
    - 2: Environment error (no workspace, invalid config, tool missing)
    - 3: Build error (a target body failed)
    - 4: Graph error (duplicate target, dependency cycle)
    - 5: Changelog error (malformed, empty, nothing to release)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    GRAPH_ERROR = 4
    CHANGELOG_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
