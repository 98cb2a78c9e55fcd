"""Storage backends for rendered artifacts."""

from __future__ import annotations

import logging
import threading
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


def _checked(relative_path: str) -> PurePosixPath:
    path = PurePosixPath(relative_path)
    if path.is_absolute() or not path.parts or ".." in path.parts:
        msg = f"Artifact path must stay inside the output directory: {relative_path!r}"
        raise ValueError(msg)
    return path


class FilesystemStorage:
    """Writes artifacts under an output directory.

    ``clear()`` removes the ``.html`` files of a previous run and any
    directories left empty by that, but leaves other files alone.
    """

    def __init__(self, output_dir: Path, suffix: str = ".html") -> None:
        self.output_dir = Path(output_dir)
        self.suffix = suffix

    def clear(self) -> None:
        if not self.output_dir.exists():
            return

        removed = 0
        emptied: set[Path] = set()
        for artifact in list(self.output_dir.rglob(f"*{self.suffix}")):
            if artifact.is_file():
                artifact.unlink()
                removed += 1
                emptied.add(artifact.parent)

        # Only directories that held an artifact, and their ancestors below
        # output_dir, are pruned. Deepest first so parents empty out last.
        candidates: set[Path] = set()
        for directory in emptied:
            while directory != self.output_dir and self.output_dir in directory.parents:
                candidates.add(directory)
                directory = directory.parent
        for directory in sorted(candidates, key=lambda p: len(p.parts), reverse=True):
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()

        logger.debug("Removed %d stale artifacts from %s", removed, self.output_dir)

    def write(self, relative_path: str, data: bytes) -> None:
        target = self.output_dir.joinpath(*_checked(relative_path).parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


class MemoryStorage:
    """Keeps artifacts in memory; used for dry runs and tests."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def clear(self) -> None:
        with self._lock:
            self.files.clear()

    def write(self, relative_path: str, data: bytes) -> None:
        key = _checked(relative_path).as_posix()
        with self._lock:
            self.files[key] = data
