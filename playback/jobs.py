from __future__ import annotations

from pathlib import Path
from typing import List

from common.types import FileJob


DEFAULT_EXTENSION = ".modraw"


class JobValidationError(ValueError):
    """Command-line input that cannot be turned into file jobs."""


def is_batch_input(input_spec: str) -> bool:
    """`@list.txt` or a folder means batch mode."""
    return input_spec.startswith("@") or Path(input_spec).is_dir()


def read_list_file(list_path: Path) -> List[Path]:
    """
    One input path per line. Blank lines and `#` comments are skipped;
    relative entries resolve against the list file's folder.
    """
    if not list_path.exists():
        raise JobValidationError(f"Input list file doesn't exist: '{list_path}'")
    if list_path.is_dir():
        raise JobValidationError(f"Input list file can't be a folder: '{list_path}'")
    try:
        text = list_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise JobValidationError(f"Input list file can't be read ({e}): '{list_path}'") from e
    base = list_path.parent
    out: List[Path] = []
    for raw in text.splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#"):
            continue
        p = Path(entry)
        out.append(p if p.is_absolute() else base / p)
    if not out:
        raise JobValidationError(f"Input list file needs to contain at least one element: '{list_path}'")
    return out


def scan_folder(folder: Path, extension: str = DEFAULT_EXTENSION) -> List[Path]:
    files = sorted(p for p in folder.iterdir() if p.name.lower().endswith(extension.lower()))
    if not files:
        raise JobValidationError(f"Input folder needs to contain at least one {extension} file: '{folder}'")
    return files


def resolve_jobs(
    input_spec: str,
    output_spec: str,
    speed: float = 1.0,
    extension: str = DEFAULT_EXTENSION,
) -> List[FileJob]:
    """
    Turn the -i/-o arguments into an ordered, validated list of file jobs.

    Raises:
        JobValidationError: with a message meant for the user.
    """
    if not speed > 0:
        raise JobValidationError("The time multiplier needs to be a strictly positive number.")

    output = Path(output_spec)
    batch = is_batch_input(input_spec)

    if batch:
        if not output.exists():
            raise JobValidationError(f"Output folder for batch mode doesn't exist: '{output}'")
        if not output.is_dir():
            raise JobValidationError(f"Output in batch mode needs to be a folder not a file: '{output}'")
        if input_spec.startswith("@"):
            inputs = read_list_file(Path(input_spec[1:]))
        else:
            inputs = scan_folder(Path(input_spec), extension)
    else:
        if not (output.is_dir() or output_spec.lower().endswith(extension.lower())):
            raise JobValidationError(f"Output needs to be a folder or a {extension} file: '{output}'")
        inputs = [Path(input_spec)]

    for p in inputs:
        if not p.exists():
            raise JobValidationError(f"Input file doesn't exist: '{p}'")
        if p.is_dir():
            raise JobValidationError(f"Input file can't be a folder: '{p}'")

    jobs = []
    for p in inputs:
        target = output / p.name if output.is_dir() else output
        if target.resolve() == p.resolve():
            raise JobValidationError(f"Output would overwrite its own input: '{p}'")
        jobs.append(FileJob(input_path=p, output_path=target))
    return jobs
