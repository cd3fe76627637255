"""Output writing for Folio.

The OutputWriter lays out rendered pages, generated files and static
assets into the output directory. Everything is written into a temporary
staging directory next to the output first; only when every file is in
place is the staging directory swapped in. A failed or interrupted build
therefore leaves the previous output untouched.

Files are written by a thread pool. Creating directories goes through a
single lock so that two threads never race on the same parent.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
import uuid
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Union

from .errors import WriteError

logger = logging.getLogger(__name__)

FileSource = Union[bytes, Path]


@dataclass(frozen=True)
class WriteSummary:
    """What a write produced.

    Attributes:
        output_dir: The final output directory.
        files: Number of generated files written (pages, feeds, archive).
        assets: Number of static assets copied.
        unchanged: Relative paths of generated files whose bytes match the
            previous output.
    """

    output_dir: Path
    files: int
    assets: int
    unchanged: tuple[str, ...] = ()


def collect_assets(static_dir: Path | None) -> list[tuple[str, Path]]:
    """List static assets as (relative output path, source file) pairs.

    Hidden files (any component starting with ``.``) are skipped.
    """
    if static_dir is None or not static_dir.is_dir():
        return []
    assets = []
    for path in sorted(static_dir.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(static_dir)
        if any(part.startswith(".") for part in rel.parts):
            continue
        assets.append((rel.as_posix(), path))
    return assets


def _asset_source(assets: Iterable[tuple[str, Path]], rel: str) -> Path:
    for asset_rel, source in assets:
        if asset_rel == rel:
            return source
    return Path(rel)


def _check_relative(rel: str) -> None:
    pure = PurePosixPath(rel)
    if not rel or pure.is_absolute() or ".." in pure.parts:
        raise WriteError(rel or ".", "Output path must stay inside the output directory")


class OutputWriter:
    """Writes the output tree atomically.

    Attributes:
        output_dir: Final output directory.
        clean: When True the new output contains only this build. When
            False the previous output is merged in first, new files winning.
        workers: Maximum number of writer threads.
        protected: Directories the output must neither replace nor sit
            inside (source and template roots).
    """

    def __init__(
        self,
        output_dir: Path,
        clean: bool = True,
        workers: int | None = None,
        protected: Iterable[Path] = (),
    ):
        self.output_dir = Path(output_dir)
        self.clean = clean
        self.workers = workers
        self.protected = tuple(Path(p) for p in protected)
        self._dir_lock = threading.Lock()
        self._created: set[Path] = set()

    def write(
        self,
        files: Mapping[str, bytes],
        assets: Iterable[tuple[str, Path]] = (),
    ) -> WriteSummary:
        """Write generated files and copy assets, then swap into place.

        Args:
            files: Relative output path to file bytes.
            assets: (relative output path, source file) pairs to copy.

        Returns:
            WriteSummary of the finished output.

        Raises:
            WriteError: On any filesystem failure or invalid output path.
        """
        self._check_target()
        assets = list(assets)
        jobs: dict[str, FileSource] = {}
        for rel, source in assets:
            _check_relative(rel)
            jobs[rel] = source
        for rel, data in files.items():
            _check_relative(rel)
            if rel in jobs:
                raise WriteError(
                    _asset_source(assets, rel),
                    f"Static asset conflicts with generated file '{rel}'",
                )
            jobs[rel] = data

        unchanged = tuple(
            sorted(rel for rel, data in files.items() if self._is_unchanged(rel, data))
        )
        staging = self._make_staging()
        try:
            if not self.clean and self.output_dir.is_dir():
                shutil.copytree(self.output_dir, staging, symlinks=True, dirs_exist_ok=True)
            self._write_all(staging, jobs)
            self._swap(staging)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            raise WriteError(
                getattr(exc, "filename", None) or self.output_dir,
                f"Could not write output: {exc.strerror or exc}",
                exc,
            ) from exc
        except WriteError:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        logger.debug("Wrote %d files and %d assets", len(files), len(assets))
        return WriteSummary(
            output_dir=self.output_dir,
            files=len(files),
            assets=len(assets),
            unchanged=unchanged,
        )

    def _check_target(self) -> None:
        target = self.output_dir.resolve()
        for protected in self.protected:
            guarded = protected.resolve()
            if target == guarded or target in guarded.parents:
                raise WriteError(
                    self.output_dir,
                    f"Refusing to replace {self.output_dir}: it contains {protected}",
                )
            if guarded in target.parents:
                raise WriteError(
                    self.output_dir,
                    f"Refusing to write {self.output_dir}: it is inside {protected}",
                )

    def _is_unchanged(self, rel: str, data: bytes) -> bool:
        previous = self.output_dir / rel
        try:
            return previous.is_file() and previous.read_bytes() == data
        except OSError:
            return False

    def _make_staging(self) -> Path:
        parent = self.output_dir.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            staging = Path(
                tempfile.mkdtemp(prefix=f".{self.output_dir.name}-", dir=parent)
            )
            staging.chmod(0o755)
        except OSError as exc:
            raise WriteError(parent, f"Could not create staging directory: {exc}", exc) from exc
        return staging

    def _ensure_dir(self, path: Path) -> None:
        with self._dir_lock:
            if path in self._created:
                return
            path.mkdir(parents=True, exist_ok=True)
            self._created.add(path)

    def _write_one(self, staging: Path, rel: str, source: FileSource) -> None:
        target = staging / rel
        self._ensure_dir(target.parent)
        if isinstance(source, bytes):
            # never write through a symlink merged in from the previous output
            if target.is_symlink() or target.exists():
                target.unlink()
            target.write_bytes(source)
        else:
            if target.is_symlink():
                target.unlink()
            shutil.copy2(source, target)

    def _write_all(self, staging: Path, jobs: Mapping[str, FileSource]) -> None:
        self._created = {staging}
        items = sorted(jobs.items())
        if self.workers == 1 or len(items) <= 1:
            for rel, source in items:
                self._write_one(staging, rel, source)
            return
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [
                executor.submit(self._write_one, staging, rel, source)
                for rel, source in items
            ]
            for future in futures:
                future.result()

    def _swap(self, staging: Path) -> None:
        target = self.output_dir
        if not target.exists():
            os.replace(staging, target)
            return
        backup = target.with_name(f".{target.name}.old-{uuid.uuid4().hex[:8]}")
        os.replace(target, backup)
        try:
            os.replace(staging, target)
        except OSError:
            os.replace(backup, target)
            raise
        shutil.rmtree(backup, ignore_errors=True)
