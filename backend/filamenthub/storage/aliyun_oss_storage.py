"""Aliyun OSS blob storage (alibabacloud-oss-v2).

Credentials come from the environment (OSS_ACCESS_KEY_ID / OSS_ACCESS_KEY_SECRET).
"""
from __future__ import annotations

from datetime import timedelta

import alibabacloud_oss_v2 as oss
from loguru import logger


class AliyunOssStorage:
    def __init__(self, bucket: str, region: str, endpoint: str | None = None, presign_expires: int = 3600) -> None:
        credentials_provider = oss.credentials.EnvironmentVariableCredentialsProvider()
        cfg = oss.config.load_default()
        cfg.credentials_provider = credentials_provider
        cfg.region = region
        if endpoint:
            cfg.endpoint = endpoint
        self.client = oss.Client(cfg)
        self.bucket = bucket
        self.presign_expires = presign_expires

    def save(self, key: str, data: bytes) -> None:
        result = self.client.put_object(oss.PutObjectRequest(bucket=self.bucket, key=key, body=data))
        logger.info("oss put {} status={} request_id={}", key, result.status_code, result.request_id)

    def load(self, key: str) -> bytes:
        result = self.client.get_object(oss.GetObjectRequest(bucket=self.bucket, key=key))
        with result.body as body_stream:
            return body_stream.read()

    def exists(self, key: str) -> bool:
        return self.client.is_object_exist(bucket=self.bucket, key=key)

    def delete(self, key: str) -> None:
        self.client.delete_object(oss.DeleteObjectRequest(bucket=self.bucket, key=key))

    def url(self, key: str) -> str:
        pre_result = self.client.presign(
            oss.GetObjectRequest(bucket=self.bucket, key=key),
            expires=timedelta(seconds=self.presign_expires),
        )
        return pre_result.url
