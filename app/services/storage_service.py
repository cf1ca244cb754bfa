import logging
import re
import secrets
import time
from pathlib import Path, PurePosixPath

from flask import current_app
from PIL import Image
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from app.errors import RemoteServiceError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "gif", "bmp", "tiff"}


class StorageService:
    """Object storage on the local upload directory.

    Objects live at ``<UPLOAD_DIR>/<bucket>/<path>`` and are served under
    ``<MEDIA_URL_PREFIX>/<bucket>/<path>``.
    """

    @staticmethod
    def _root():
        return Path(current_app.config["UPLOAD_DIR"])

    @staticmethod
    def _object_path(bucket, path):
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts or not relative.parts:
            raise ValidationError("Invalid storage path.")
        return StorageService._root() / bucket / Path(*relative.parts)

    @staticmethod
    def is_allowed(filename):
        return "." in (filename or "") and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS

    @staticmethod
    def build_object_path(entity, owner_id, property_id, name, filename):
        clean_name = re.sub(r"[^a-zA-Z0-9]", "_", name or "")
        clean_filename = re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "")
        timestamp = int(time.time() * 1000)
        # Same-named files uploaded in one millisecond differ only by the token.
        token = secrets.token_hex(4)
        return f"{entity}/{owner_id}/{property_id}/{clean_name}_{timestamp}_{token}_{clean_filename}"

    @classmethod
    def verify_image(cls, storage: FileStorage):
        filename = secure_filename(storage.filename or "")
        if not filename or not cls.is_allowed(filename):
            raise ValidationError(f"Unsupported image format: {storage.filename}.", fields=["picture"])

        # Verify actual image bytes to avoid extension spoofing.
        try:
            img = Image.open(storage.stream)
            img.verify()
            storage.stream.seek(0)
        except Exception as exc:
            raise ValidationError(f"Invalid image file: {storage.filename}.", fields=["picture"]) from exc

    @classmethod
    def upload(cls, bucket, path, storage: FileStorage, cache_control=None, upsert=False):
        target = cls._object_path(bucket, path)
        if target.exists() and not upsert:
            raise RemoteServiceError(f"Object already exists: {bucket}/{path}.")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            storage.save(target)
        except OSError as exc:
            logger.error("Upload to %s/%s failed: %s", bucket, path, exc)
            raise RemoteServiceError("Upload failed.") from exc
        logger.info(
            "Stored %s/%s (cache-control %s)",
            bucket,
            path,
            cache_control or current_app.config.get("STORAGE_CACHE_CONTROL"),
        )
        return path

    @staticmethod
    def get_public_url(bucket, path):
        prefix = current_app.config["MEDIA_URL_PREFIX"].rstrip("/")
        return f"{prefix}/{bucket}/{path}"

    @staticmethod
    def path_from_public_url(bucket, url):
        marker = f"/{bucket}/"
        if not url or marker not in url:
            return None
        return url.split(marker, 1)[1]

    @classmethod
    def remove(cls, bucket, paths):
        removed = []
        for path in paths:
            target = cls._object_path(bucket, path)
            try:
                target.unlink()
                removed.append(path)
            except FileNotFoundError:
                logger.warning("Object %s/%s already missing", bucket, path)
            except OSError as exc:
                logger.error("Removing %s/%s failed: %s", bucket, path, exc)
                raise RemoteServiceError("Storage removal failed.") from exc
        return removed

    @classmethod
    def upload_image(cls, bucket, entity, owner_id, property_id, name, storage: FileStorage):
        cls.verify_image(storage)
        path = cls.build_object_path(entity, owner_id, property_id, name, storage.filename)
        cls.upload(bucket, path, storage, cache_control=current_app.config.get("STORAGE_CACHE_CONTROL"))
        return cls.get_public_url(bucket, path)

    @classmethod
    def remove_urls(cls, bucket, urls):
        """Best-effort removal of previously published objects."""
        paths = [p for p in (cls.path_from_public_url(bucket, url) for url in urls or []) if p]
        if not paths:
            return []
        try:
            return cls.remove(bucket, paths)
        except (RemoteServiceError, ValidationError) as exc:
            logger.warning("Could not delete old objects %s: %s", paths, exc.message)
            return []
