from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from app.core.config import StorageConfig
from app.core.logging import get_logger
from app.domain.content import EXTENSIONS, content_type_for, validate_upload
from app.domain.naming import generate_unique_filename
from app.domain.paths import check_relative_path, resolve_within_root, sanitize_folder
from app.services.errors import FileTooLarge, FilesystemError, InvalidPath, NotFound
from app.services.models import StoredFile, UploadResult


_logger = get_logger(__name__)

MAX_NAME_ATTEMPTS = 5


class LocalFileStorage:
    """Validated, traversal-safe persistence of uploads under one root."""

    def __init__(self, config: StorageConfig) -> None:
        self.config = config
        self.root = config.root

    @property
    def kind(self) -> str:
        return self.config.kind

    def validate(self, data: bytes, mime_type: str) -> None:
        validate_upload(
            data,
            mime_type,
            allowed_types=self.config.allowed_types,
            max_size=self.config.max_file_size,
        )

    def ensure_directory(self, folder: str | None = None) -> tuple[Path, str]:
        """Create the (optionally nested) target directory and return it."""

        segment = sanitize_folder(folder)
        target = self.root / segment if segment else self.root
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _logger.error(
                "Storage directory creation failed",
                kind=self.kind,
                folder=segment,
                errno=exc.errno,
                error=str(exc),
            )
            raise FilesystemError() from exc
        return target, segment

    def save_bytes(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        *,
        folder: str | None = None,
        extension: str | None = None,
    ) -> UploadResult:
        """
        Validate and persist ``data`` under a freshly generated name.

        The bytes land in a temporary file in the destination directory and
        are renamed into place, so a crash never leaves a partial file under
        its final name.
        """
        self.validate(data, mime_type)

        if extension is None:
            extension = EXTENSIONS.get(mime_type)

        directory, segment = self.ensure_directory(folder)
        filename, destination = self._reserve_name(directory, original_name, extension)
        self._write_atomic(directory, destination, data)

        relative_path = f"{segment}/{filename}" if segment else filename
        _logger.info(
            "Stored upload",
            kind=self.kind,
            destination=str(destination),
            size=len(data),
            mime_type=mime_type,
        )
        return UploadResult(
            filename=filename,
            original_name=original_name,
            url=self.build_url(relative_path),
            file_size=len(data),
            mime_type=mime_type,
            relative_path=relative_path,
        )

    def build_url(self, relative_path: str) -> str:
        return f"{self.config.url_prefix}/{relative_path}"

    def relative_from_url(self, url: str) -> str:
        prefix = self.config.url_prefix + "/"
        return url[len(prefix):] if url.startswith(prefix) else url

    def resolve(self, relative_path: str) -> Path:
        """Apply the lexical and containment checks to a requested path."""

        cleaned = check_relative_path(relative_path)
        return resolve_within_root(self.root, cleaned)

    def open(self, relative_path: str) -> StoredFile:
        """
        Locate a stored file for reading.

        Order of checks: lexical path rules, containment within the real
        root, existence as a regular file, then the size ceiling.
        """
        target = self.resolve(relative_path)
        try:
            info = target.stat()
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise NotFound() from exc
        except OSError as exc:
            _logger.error(
                "Storage stat failed", kind=self.kind, errno=exc.errno, error=str(exc)
            )
            raise FilesystemError("Failed to serve file") from exc

        if not stat.S_ISREG(info.st_mode):
            raise NotFound("Not a file")
        if info.st_size > self.config.max_file_size:
            raise FileTooLarge()

        return StoredFile(
            path=target, size=info.st_size, content_type=content_type_for(target.name)
        )

    def read(self, stored: StoredFile, start: int = 0, end: int | None = None) -> bytes:
        """Read ``stored`` from ``start`` through ``end`` inclusive."""

        last = stored.size - 1 if end is None else end
        try:
            with stored.path.open("rb") as handle:
                handle.seek(start)
                return handle.read(max(0, last - start + 1))
        except FileNotFoundError as exc:
            raise NotFound() from exc
        except OSError as exc:
            _logger.error(
                "Storage read failed", kind=self.kind, errno=exc.errno, error=str(exc)
            )
            raise FilesystemError("Failed to serve file") from exc

    def delete(self, url_or_path: str) -> bool:
        """Remove a stored file; a missing file is logged, not raised."""

        relative = self.relative_from_url(url_or_path)
        try:
            target = self.resolve(relative)
        except InvalidPath:
            _logger.warning("Refused storage delete", kind=self.kind, path=relative)
            raise

        try:
            target.unlink()
        except FileNotFoundError:
            _logger.info("Storage delete skipped", kind=self.kind, path=relative)
            return False
        except IsADirectoryError as exc:
            raise NotFound("Not a file") from exc
        except OSError as exc:
            _logger.error(
                "Storage delete failed", kind=self.kind, errno=exc.errno, error=str(exc)
            )
            raise FilesystemError() from exc

        _logger.info("Deleted stored file", kind=self.kind, path=relative)
        return True

    def _reserve_name(
        self, directory: Path, original_name: str, extension: str | None
    ) -> tuple[str, Path]:
        for attempt in range(1, MAX_NAME_ATTEMPTS + 1):
            filename = generate_unique_filename(original_name, extension=extension)
            destination = directory / filename
            if not destination.exists():
                return filename, destination
            _logger.warning(
                "Generated filename collided", kind=self.kind, attempt=attempt
            )
        raise FilesystemError("Could not allocate a unique filename")

    def _write_atomic(self, directory: Path, destination: Path, data: bytes) -> None:
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=directory, prefix=".upload-", suffix=".tmp"
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, destination)
        except OSError as exc:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            _logger.error(
                "Storage write failed", kind=self.kind, errno=exc.errno, error=str(exc)
            )
            raise FilesystemError() from exc
