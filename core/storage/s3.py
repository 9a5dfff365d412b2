from __future__ import annotations

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from core.exceptions import S3Error, TranscriptExistsError, TranscriptNotFoundError

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}
# IfNoneMatch="*" rejections: 412 when the key exists, 409 on a concurrent conditional write.
_TAKEN_CODES = {"PreconditionFailed", "412", "ConditionalRequestConflict"}


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3Storage:
    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
        extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
        # Static credentials when configured, otherwise the default boto3 chain.
        self.client = session.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            **extra,
        )

    def _key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def put_bytes(self, key: str, data: bytes, content_type: str) -> str:
        s3_key = self._key(key)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=s3_key,
                Body=data,
                ContentType=content_type,
                IfNoneMatch="*",
            )
        except ClientError as exc:
            if _error_code(exc) in _TAKEN_CODES:
                raise TranscriptExistsError("Transcript already exists", {"key": s3_key}) from exc
            logger.error("put_object s3://{bucket}/{key} failed: {exc}", bucket=self.bucket, key=s3_key, exc=exc)
            raise S3Error("Error writing transcript", {"key": s3_key}) from exc
        except BotoCoreError as exc:
            logger.error("put_object s3://{bucket}/{key} failed: {exc}", bucket=self.bucket, key=s3_key, exc=exc)
            raise S3Error("Error writing transcript", {"key": s3_key}) from exc
        return f"s3://{self.bucket}/{s3_key}"

    def get_bytes(self, key: str) -> bytes:
        s3_key = self._key(key)
        try:
            result = self.client.get_object(Bucket=self.bucket, Key=s3_key)
        except ClientError as exc:
            if _error_code(exc) in _MISSING_CODES:
                raise TranscriptNotFoundError("Transcript not found", {"key": s3_key}) from exc
            logger.error("get_object s3://{bucket}/{key} failed: {exc}", bucket=self.bucket, key=s3_key, exc=exc)
            raise S3Error("Error reading transcript", {"key": s3_key}) from exc
        except BotoCoreError as exc:
            logger.error("get_object s3://{bucket}/{key} failed: {exc}", bucket=self.bucket, key=s3_key, exc=exc)
            raise S3Error("Error reading transcript", {"key": s3_key}) from exc

        body = result["Body"]
        try:
            return body.read()
        except (BotoCoreError, OSError) as exc:
            logger.error("Reading body of s3://{bucket}/{key} failed: {exc}", bucket=self.bucket, key=s3_key, exc=exc)
            raise S3Error("Error reading transcript", {"key": s3_key}) from exc
        finally:
            body.close()


__all__ = ["S3Storage"]
