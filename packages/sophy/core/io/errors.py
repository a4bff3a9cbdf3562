from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import BaseModel, Field


class FilesystemErrorData(BaseModel):
    """Structured data for filesystem errors.

    Args:
        message: Human-readable error description
        operation: Adapter/facade operation that failed (read, prepend, ...)
        path: Virtual path the operation was addressing
        cause: Original exception that caused this error
    """

    model_config = {"arbitrary_types_allowed": True}

    message: str
    operation: str
    path: str | None = None
    cause: BaseException | None = Field(default=None, repr=False)


class FilesystemError(Exception):
    """Base exception for all virtual filesystem errors.

    Wraps structured error data in an exception for ergonomic error handling.

    Attributes:
        data: Structured error data (FilesystemErrorData)
        message: Human-readable error description
        operation: Operation that failed
        path: Virtual path involved
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        *,
        message: str,
        operation: str,
        path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.data = FilesystemErrorData(
            message=message,
            operation=operation,
            path=path,
            cause=cause,
        )
        # Expose fields as attributes for convenience
        self.message = self.data.message
        self.operation = self.data.operation
        self.path = self.data.path
        self.cause = self.data.cause

        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error for logging and display."""
        parts = [self.message, self.operation]
        if self.path is not None:
            parts.append(f"path={self.path}")
        return " | ".join(parts)


class NotFoundError(FilesystemError):
    """Path does not exist where existence was required."""


class NotDirectoryError(FilesystemError):
    """Operation requires a directory but the path is something else."""


class NotFileError(FilesystemError):
    """Operation requires a file but the path is something else."""


class StorageIOError(FilesystemError):
    """Underlying storage primitive failed for a reason other than existence."""


class UnknownNodeTypeError(FilesystemError):
    """Facade received metadata it cannot classify into a handle."""


@contextmanager
def translate_os_errors(operation: str, path: str | None = None) -> Iterator[None]:
    """Re-raise OSError from storage primitives as FilesystemError subclasses.

    Args:
        operation: Operation name recorded on the error
        path: Virtual path recorded on the error

    Raises:
        NotFoundError: On FileNotFoundError
        NotDirectoryError: On NotADirectoryError
        NotFileError: On IsADirectoryError
        StorageIOError: On any other OSError
    """
    try:
        yield
    except FileNotFoundError as e:
        raise NotFoundError(
            message="No such file or directory", operation=operation, path=path, cause=e
        ) from e
    except NotADirectoryError as e:
        raise NotDirectoryError(
            message="Not a directory", operation=operation, path=path, cause=e
        ) from e
    except IsADirectoryError as e:
        raise NotFileError(message="Is a directory", operation=operation, path=path, cause=e) from e
    except OSError as e:
        raise StorageIOError(
            message=e.strerror or str(e), operation=operation, path=path, cause=e
        ) from e
