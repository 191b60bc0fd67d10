"""Exception hierarchy for tuistgraph.

Library code raises these; the service layer converts them into
:class:`~tuistgraph.services.result.ServiceResult` errors and the CLI
turns those into exit codes.
"""

from __future__ import annotations


class TuistGraphError(Exception):
    """Base class for every error raised by tuistgraph."""


class InvocationError(TuistGraphError):
    """A ``tuist`` subprocess finished unsuccessfully.

    Attributes:
        command: Executable followed by its arguments joined without a
            separator. Consumers of existing messages rely on this exact
            form, so it is not space-separated.
        code: Exit status, or the signal number for :class:`SignalledError`.
        stderr: Everything the child wrote to standard error.
    """

    def __init__(self, command: str, code: int, stderr: bytes = b"") -> None:
        self.command = command
        self.code = code
        self.stderr = stderr
        super().__init__(self.message)

    @property
    def stderr_text(self) -> str | None:
        """Captured stderr as text, or None when empty or not valid UTF-8."""
        if not self.stderr:
            return None
        try:
            return self.stderr.decode("utf-8")
        except UnicodeDecodeError:
            return None

    @property
    def message(self) -> str:
        return f"The '{self.command}' command failed with code {self.code}"

    def __reduce__(self) -> tuple[type[InvocationError], tuple[str, int, bytes]]:
        return type(self), (self.command, self.code, self.stderr)


class SignalledError(InvocationError):
    """The child process was terminated by a signal."""

    @property
    def message(self) -> str:
        text = self.stderr_text
        if text is not None:
            return (
                f"The '{self.command}' was interrupted with a signal {self.code} "
                f"and message:\n{text}"
            )
        return f"The '{self.command}' was interrupted with a signal {self.code}"


class TerminatedError(InvocationError):
    """The child process exited with a nonzero status."""

    @property
    def message(self) -> str:
        text = self.stderr_text
        if text is not None:
            return (
                f"The '{self.command}' command exited with error code {self.code} "
                f"and message:\n{text}"
            )
        return f"The '{self.command}' command exited with error code {self.code}"


class GraphDecodeError(TuistGraphError, ValueError):
    """``graph.json`` was not valid JSON or did not match the graph schema."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not decode graph at {path}: {reason}")


class DependencyCycleError(TuistGraphError):
    """Target dependencies form a cycle, so no build order exists."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__("Dependency cycle: " + " -> ".join(cycle))
