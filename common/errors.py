"""
Failure taxonomy shared by the parser and the playback layers.

Everything except EndOfInput is fatal for the whole batch: the orchestrator
lets these propagate and the CLI turns them into a non-zero exit.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union


class ReplayError(Exception):
    """Base class for fatal replay failures."""


class MalformedHeader(ReplayError):
    """Preamble literal mismatch, missing OFFSET_TIME, or truncated header."""


class MissingStartPacket(ReplayError):
    """First packet absent, carrying a timestamp, or not signed $SOM."""


class UnsequencedPacket(ReplayError):
    """A packet after the start packet with no reconstructible time."""


class IOFailure(ReplayError):
    """Read, write or delete failure at the file-system boundary."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class EndOfInput(Exception):
    """Cursor exhausted. Expected while framing, never shown to the user."""
