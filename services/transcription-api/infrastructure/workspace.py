"""Run-exclusive temporary directories."""

import os
import shutil
import tempfile
import time
from typing import BinaryIO

from article_common.logging import setup_logging

from domain.validation import path_argument
from exceptions import PayloadTooLargeError, WorkspaceError

logger = setup_logging()

COPY_BUFFER_BYTES = 1024 * 1024


class TemporaryWorkspace:
    """
    A uniquely named directory owned by one run.

    Entering the context creates the directory; leaving it removes the
    directory with everything inside, whether the run succeeded or not.
    """

    def __init__(self, root: str | None = None, prefix: str = "transcribe"):
        self._root = root
        self._prefix = prefix
        self._path: str | None = None

    @property
    def path(self) -> str:
        if self._path is None:
            raise WorkspaceError("<unopened>")
        return self._path

    def __enter__(self) -> "TemporaryWorkspace":
        stamp = time.strftime("%Y%m%d%H%M%S")
        try:
            # mkdtemp adds a random suffix, so concurrent runs never collide
            self._path = tempfile.mkdtemp(
                prefix=f"{self._prefix}_{stamp}_", dir=self._root
            )
        except OSError as e:
            logger.exception("Workspace creation failed", extra={"root": self._root})
            raise WorkspaceError(self._root or tempfile.gettempdir(), e) from e
        logger.info("Workspace created", extra={"workspace": self._path})
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.remove()

    def remove(self) -> None:
        if self._path is None:
            return
        path, self._path = self._path, None
        try:
            shutil.rmtree(path)
            logger.info("Workspace removed", extra={"workspace": path})
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("Workspace removal failed", extra={"workspace": path})

    def file_path(self, name: str) -> str:
        """Returns the absolute path of ``name`` inside the workspace."""
        try:
            return path_argument(os.path.join(self.path, name))
        except ValueError as e:
            raise WorkspaceError(os.path.join(self.path, name), e) from e

    def write_stream(self, name: str, stream: BinaryIO, max_bytes: int) -> str:
        """
        Copies a stream into the workspace.

        Raises:
            PayloadTooLargeError: If the stream holds more than ``max_bytes``.
            WorkspaceError: If the file cannot be written.
        """
        destination = self.file_path(name)
        written = 0
        try:
            with open(destination, "wb") as f:
                while True:
                    block = stream.read(COPY_BUFFER_BYTES)
                    if not block:
                        break
                    written += len(block)
                    if written > max_bytes:
                        raise PayloadTooLargeError(written, max_bytes)
                    f.write(block)
        except OSError as e:
            logger.exception("Writing into workspace failed", extra={"path": destination})
            raise WorkspaceError(destination, e) from e

        logger.info(
            "Input saved to workspace", extra={"path": destination, "size": written}
        )
        return destination
