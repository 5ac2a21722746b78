import os
import re
import tempfile
from pathlib import Path
from typing import Union

from schema_registry.core.errors import (
    BlobExistsError,
    BlobNotFoundError,
    IntegrityError,
    InvalidInputError,
)
from schema_registry.models.domain import APP_LEVEL_DIR, Scope

_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]{0,127}")
_MAX_FILENAME_LEN = 255


def validate_name(value: str, field: str) -> str:
    if not _NAME_RE.fullmatch(value):
        raise InvalidInputError(
            f"{field} must start with a letter or digit and contain only "
            "letters, digits, '.', '_' or '-' (max 128 characters)"
        )
    return value


def validate_filename(filename: str) -> str:
    if (
        not filename
        or filename in {".", ".."}
        or "/" in filename
        or "\\" in filename
        or "\x00" in filename
        or len(filename) > _MAX_FILENAME_LEN
    ):
        raise InvalidInputError("filename must be a plain file name")
    return filename


def _write_durably(handle, data: bytes) -> None:
    handle.write(data)
    handle.flush()
    os.fsync(handle.fileno())


class ContentStore:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def scope_dir(self, scope: Scope) -> Path:
        app_dir = validate_name(scope.application, "application")
        if scope.service is None:
            return self.root / app_dir / APP_LEVEL_DIR
        return self.root / app_dir / validate_name(scope.service, "service")

    def store(
        self,
        scope: Scope,
        version: int,
        original_filename: str,
        data: bytes,
        replace: bool = False,
    ) -> str:
        folder = self.scope_dir(scope)
        filename = f"{version}-{validate_filename(original_filename)}"
        folder.mkdir(parents=True, exist_ok=True)
        target = folder / filename
        relative_path = target.relative_to(self.root).as_posix()

        if replace:
            self._replace(folder, target, data)
            return relative_path
        try:
            handle = open(target, "xb")
        except FileExistsError as exc:
            raise BlobExistsError(relative_path) from exc
        try:
            with handle:
                _write_durably(handle, data)
        except BaseException:
            target.unlink()
            raise
        return relative_path

    @staticmethod
    def _replace(folder: Path, target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=folder, prefix=".upload-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                _write_durably(handle, data)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def absolute_path(self, relative_path: str) -> Path:
        candidate = (self.root / relative_path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise IntegrityError(f"path escapes the storage root: {relative_path}")
        return candidate

    def load(self, relative_path: str) -> bytes:
        path = self.absolute_path(relative_path)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise BlobNotFoundError(f"blob not found: {relative_path}") from exc
