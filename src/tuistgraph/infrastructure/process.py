"""Run the external tool and classify how it finished.

One synchronous child per call: stdout and stderr are captured, the
caller blocks until exit, and a failure becomes an
:class:`~tuistgraph.errors.InvocationError`. Spawn failures (missing or
non-executable binary) propagate as :class:`OSError`.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from typing import Protocol

from tuistgraph.errors import SignalledError, TerminatedError

logger = logging.getLogger(__name__)


class Runner(Protocol):
    """Callable signature shared by :func:`run` and test doubles."""

    def __call__(
        self,
        executable: str,
        arguments: Sequence[str],
        environment: Mapping[str, str],
    ) -> None: ...


def resolve_executable(executable: str, search_path: str | None = None) -> str:
    """Resolve *executable* through ``PATH`` unless it already names a path.

    The lookup uses the calling process's ``PATH`` (or *search_path*),
    not the child's environment, which may not define one. Unresolvable
    names are returned unchanged so the spawn reports the failure.
    """
    if os.sep in executable or (os.altsep and os.altsep in executable):
        return executable
    if search_path is None:
        search_path = os.environ.get("PATH", os.defpath)
    return shutil.which(executable, path=search_path) or executable


def join_command(executable: str, arguments: Sequence[str]) -> str:
    """Render the command string used in error messages.

    Arguments are concatenated with no separator. Existing consumers
    match on this form.
    """
    return executable + "".join(arguments)


def run(
    executable: str,
    arguments: Sequence[str],
    environment: Mapping[str, str],
) -> None:
    """Run *executable* with *arguments*, waiting for it to finish.

    Args:
        executable: Binary path or a name to look up on ``PATH``.
        arguments: Arguments passed after the executable, in order.
        environment: The complete environment of the child process.

    Raises:
        SignalledError: The child was killed by a signal.
        TerminatedError: The child exited with a nonzero status.
        OSError: The child could not be spawned.
    """
    resolved = resolve_executable(executable)
    logger.debug(
        "Running %s %s (env keys: %s)", resolved, " ".join(arguments), sorted(environment)
    )

    completed = subprocess.run(
        [resolved, *arguments],
        env=dict(environment),
        capture_output=True,
        check=False,
    )

    if completed.returncode == 0:
        logger.debug("%s exited successfully", resolved)
        return

    command = join_command(executable, arguments)
    if completed.returncode < 0:
        signal_number = -completed.returncode
        logger.debug("%s was killed by signal %d", resolved, signal_number)
        raise SignalledError(command, signal_number, completed.stderr)

    logger.debug("%s exited with status %d", resolved, completed.returncode)
    raise TerminatedError(command, completed.returncode, completed.stderr)
