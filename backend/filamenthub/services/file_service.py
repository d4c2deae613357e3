import dataclasses
import json
import time
import uuid
from dataclasses import dataclass

from flask import current_app
from loguru import logger
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..domain.profile import Profile
from ..errors import FileTooLargeError, InvalidUploadError
from ..storage.ext_storage import storage

ALLOWED_EXTENSIONS = ["json"]

MAX_FILENAME_LENGTH = 200


@dataclass
class StoredFile:
    key: str
    url: str
    file_name: str
    size: int


class FileService:

    @staticmethod
    def validate_profile_file(file: FileStorage | None) -> tuple[str, bytes]:
        """Check name, extension, size and JSON body; return (file_name, content)."""
        if file is None or not file.filename:
            raise InvalidUploadError("Please upload a filament profile file.")
        filename = file.filename
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidUploadError("Please select a JSON file.")
        if len(filename) > MAX_FILENAME_LENGTH:
            filename = filename.rsplit(".", 1)[0][:MAX_FILENAME_LENGTH] + "." + extension

        content = file.read()
        file_size_limit = int(current_app.config.get("UPLOAD_FILE_SIZE_LIMIT", 5)) * 1024 * 1024
        if len(content) > file_size_limit:
            raise FileTooLargeError(f"File size exceeded. {len(content)} > {file_size_limit}")
        try:
            json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidUploadError(f"File is not valid JSON: {e}") from e
        return filename, content

    @staticmethod
    def store_profile_file(filename: str, content: bytes, prefix: str = "profiles") -> StoredFile:
        safe_name = secure_filename(filename) or "profile.json"
        file_key = f"{prefix}/{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{safe_name}"
        storage.save(file_key, content)
        logger.info("Stored {} file {} ({} bytes)", prefix, file_key, len(content))
        return StoredFile(key=file_key, url=storage.url(file_key), file_name=filename, size=len(content))

    @staticmethod
    def delete_file(file_key: str | None) -> None:
        if not file_key:
            return
        try:
            storage.delete(file_key)
        except Exception as e:
            # The row is already gone; an orphaned blob is only wasted space.
            logger.warning("Could not delete stored file {}: {}", file_key, e)

    @staticmethod
    def load_file(file_key: str) -> bytes:
        return storage.load(file_key)

    @staticmethod
    def with_urls(profile: Profile) -> Profile:
        """Rebuild download URLs from the stored keys.

        OSS URLs are presigned and expire, so they are never served from the row.
        """
        changes = {}
        if profile.file_key:
            changes["file_url"] = storage.url(profile.file_key)
        if profile.config_file_key:
            changes["config_file_url"] = storage.url(profile.config_file_key)
        return dataclasses.replace(profile, **changes) if changes else profile
