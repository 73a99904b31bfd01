from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Union

from common.errors import IOFailure


class FileSink:
    """
    Append-only output file.

    Every write is flushed, so a process killed mid-replay leaves the file
    ending on the last complete packet.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.bytes_written = 0
        self._fh: Optional[BinaryIO] = None

    def reset(self) -> None:
        """Delete a pre-existing output file."""
        self.close()
        try:
            if self.path.exists():
                self.path.unlink()
        except OSError as e:
            raise IOFailure(self.path, f"cannot delete existing output ({e.strerror or e})") from e
        self.bytes_written = 0

    def write(self, data: bytes) -> None:
        try:
            if self._fh is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._fh = self.path.open("ab")
            self._fh.write(data)
            self._fh.flush()
        except OSError as e:
            raise IOFailure(self.path, f"cannot write output ({e.strerror or e})") from e
        self.bytes_written += len(data)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "FileSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def read_input(path: Union[str, Path]) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise IOFailure(path, f"cannot read input ({e.strerror or e})") from e
