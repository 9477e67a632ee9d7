import os
import logging
from typing import Optional

from werkzeug.datastructures import FileStorage

from utils import now_ms, collapse_whitespace, remove_file_quietly

logger = logging.getLogger(__name__)

MIN_RESUME_BYTES = 50 * 1024
MAX_RESUME_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024

ALLOWED_EXTENSIONS = {'.pdf', '.doc', '.docx'}
ALLOWED_MIMETYPES = {
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
}

INVALID_TYPE_MESSAGE = 'Invalid file type. Only PDF, DOC and DOCX are allowed'
TOO_LARGE_MESSAGE = 'File too large (max 5 MB)'
TOO_SMALL_MESSAGE = 'Resume file is too small (min 50 KB)'
UNREADABLE_MESSAGE = 'Could not process resume file'


class UploadError(ValueError):
    """A resume upload failed validation. The message is shown on the form."""


def get_file_extension(filename: str) -> str:
    if not filename:
        return ""
    return os.path.splitext(filename.lower())[1]


def allowed_resume(filename: str, mimetype: Optional[str]) -> bool:
    """Extension decides. A matching content type is accepted too, but is not required."""
    ext = get_file_extension(filename)
    if ext in ALLOWED_EXTENSIONS and mimetype in ALLOWED_MIMETYPES:
        return True
    if ext in ALLOWED_EXTENSIONS:
        if mimetype:
            logger.debug(f"Accepting {filename} by extension despite content type {mimetype}")
        return True
    return False


class ResumeUploadHandler:
    """Validates resume uploads and persists them under the uploads directory"""

    def __init__(self, upload_dir: str,
                 min_bytes: int = MIN_RESUME_BYTES, max_bytes: int = MAX_RESUME_BYTES):
        self.upload_dir = upload_dir
        self.min_bytes = min_bytes
        self.max_bytes = max_bytes
        os.makedirs(self.upload_dir, exist_ok=True)

    def stored_filename(self, original_name: str) -> str:
        base = os.path.basename(original_name.replace('\\', '/'))
        return f"{now_ms()}-{collapse_whitespace(base)}"

    def save(self, upload: Optional[FileStorage]) -> Optional[str]:
        """Stream an upload to disk and return its path, or None if no file was sent.

        Raises UploadError for a disallowed type (nothing is written) or when
        the stream exceeds ``max_bytes`` (the partial file is removed).
        """
        if upload is None or not upload.filename:
            return None

        if not allowed_resume(upload.filename, upload.mimetype):
            logger.info(f"Rejected resume upload with bad type: {upload.filename} ({upload.mimetype})")
            raise UploadError(INVALID_TYPE_MESSAGE)

        path = os.path.join(self.upload_dir, self.stored_filename(upload.filename))
        written = 0
        try:
            with open(path, 'wb') as f:
                while True:
                    chunk = upload.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_bytes:
                        raise UploadError(TOO_LARGE_MESSAGE)
                    f.write(chunk)
        except UploadError:
            self.discard(path)
            logger.info(f"Rejected oversized resume upload: {upload.filename}")
            raise

        logger.info(f"Saved resume upload {path} ({written} bytes)")
        return path

    def enforce_min_size(self, path: str) -> None:
        """Check the saved file on disk. Undersized files are deleted."""
        try:
            size = os.path.getsize(path)
        except OSError as e:
            logger.error(f"Could not stat uploaded resume {path}: {e}")
            raise UploadError(UNREADABLE_MESSAGE)

        if size < self.min_bytes:
            self.discard(path)
            raise UploadError(TOO_SMALL_MESSAGE)

    def discard(self, path: Optional[str]) -> None:
        """Remove an orphaned upload after a failed submission"""
        if remove_file_quietly(path, "(orphaned upload)"):
            logger.debug(f"Removed orphaned upload {path}")

    def reference(self, path: str) -> str:
        """The value stored on the Application record"""
        return '/uploads/' + os.path.basename(path)
