"""Blob storage as a Flask extension; backend picked by ``STORAGE_TYPE``."""
from __future__ import annotations

from typing import Optional

from flask import Flask
from loguru import logger

from .base import BlobStorage


class Storage:
    def __init__(self) -> None:
        self.backend: Optional[BlobStorage] = None

    def init_app(self, app: Flask) -> None:
        kind = (app.config.get("STORAGE_TYPE") or "local").lower()
        if kind == "aliyun-oss":
            from .aliyun_oss_storage import AliyunOssStorage

            bucket = app.config.get("ALIYUN_OSS_BUCKET_NAME")
            region = app.config.get("ALIYUN_OSS_REGION")
            if not bucket or not region:
                raise RuntimeError("Aliyun OSS needs ALIYUN_OSS_BUCKET_NAME and ALIYUN_OSS_REGION")
            self.backend = AliyunOssStorage(
                bucket,
                region,
                endpoint=app.config.get("ALIYUN_OSS_ENDPOINT"),
                presign_expires=app.config.get("ALIYUN_OSS_PRESIGN_EXPIRES", 3600),
            )
        elif kind == "local":
            from .local_storage import LocalStorage

            self.backend = LocalStorage(app.config["STORAGE_LOCAL_PATH"], app.config["PUBLIC_BASE_URL"])
        else:
            raise ValueError(f"unsupported storage type: {kind}")
        logger.info("Blob storage backend: {}", kind)

    def _require(self) -> BlobStorage:
        if self.backend is None:
            raise RuntimeError("storage is not initialized")
        return self.backend

    def save(self, key: str, data: bytes) -> None:
        self._require().save(key, data)

    def load(self, key: str) -> bytes:
        return self._require().load(key)

    def exists(self, key: str) -> bool:
        return self._require().exists(key)

    def delete(self, key: str) -> None:
        self._require().delete(key)

    def url(self, key: str) -> str:
        return self._require().url(key)


storage = Storage()
