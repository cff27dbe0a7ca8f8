"""Failure types raised by pipeline stages.

Every stage failure is an ``InstallerError`` carrying the stage it happened
in, so the orchestrator can report where the run stopped without knowing
anything about the stage itself.  A missing GPU or a too-old driver is not
an error; those outcomes are ``Eligibility`` values.
"""

from enum import Enum
from typing import Optional


class Stage(Enum):
    """Pipeline states, in the order the orchestrator moves through them."""
    PROBING = "probing"
    GATED = "gated"
    FIXING_UP = "fixing-up"
    EXTRACTING = "extracting"
    PATCHING = "patching"
    INSTALLING = "installing"
    CONFIGURING = "configuring"
    ENABLING = "enabling"
    DONE = "done"
    ABORTED = "aborted"


class InstallerError(Exception):
    """Base class for fatal stage failures."""

    def __init__(self, stage: Stage, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.target = target

    def __str__(self) -> str:
        stage_name = self.stage.value
        if self.target:
            return f"{stage_name}: {self.message} ({self.target})"
        return f"{stage_name}: {self.message}"


class IOFailure(InstallerError):
    """A required file is missing or a destination cannot be written."""


class ExternalToolFailure(InstallerError):
    """A launched executable exited non-zero or could not be started."""

    def __init__(self, stage: Stage, message: str, target: Optional[str] = None,
                 returncode: Optional[int] = None):
        super().__init__(stage, message, target)
        self.returncode = returncode


class ConfigurationWriteFailure(InstallerError):
    """The stereo registry namespace could not be opened or written."""
