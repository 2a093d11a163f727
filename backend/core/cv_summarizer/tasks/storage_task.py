"""
S3 artifact storage task.

Reads uploads, writes extracted text and summary artifacts, and deletes
rejected uploads.

Artifact keys:
- uploads/{user_id}/{timestamp}_extracted-text.txt
- uploads/{user_id}/{timestamp}_ai_summary.json

Dependencies: boto3
System role: Object store adapter for intake and processing
"""

import json
import logging
from datetime import datetime, timezone
from urllib.parse import quote
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from backend.core.cv_summarizer.models import StageResult
from backend.core.exceptions import ObjectStoreError

logger = logging.getLogger(__name__)

EXTRACTED_TEXT_SUFFIX = "extracted-text.txt"
AI_SUMMARY_SUFFIX = "ai_summary.json"


def artifact_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp safe for object keys (':' and '.' become '-')."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat().replace(":", "-").replace(".", "-")


def artifact_key(prefix: str, user_id: str, timestamp: str, suffix: str) -> str:
    """Build a per-user, per-timestamp artifact key."""
    return f"{prefix}/{user_id}/{timestamp}_{suffix}"


class S3ArtifactStore:
    """Object store adapter over a single S3 bucket."""

    def __init__(self, s3_client: Any, bucket: str, region: str) -> None:
        """
        Initialize artifact store.

        Args:
            s3_client: boto3 S3 client
            bucket: Bucket for artifacts
            region: Bucket region (used for object URLs)
        """
        self._s3_client = s3_client
        self._bucket = bucket
        self._region = region

    @property
    def bucket(self) -> str:
        return self._bucket

    def object_url(self, key: str, bucket: str | None = None) -> str:
        """Virtual-hosted style URL for an object, with the key percent-encoded."""
        return f"https://{bucket or self._bucket}.s3.{self._region}.amazonaws.com/{quote(key)}"

    def put(
        self,
        key: str,
        body: bytes | str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """
        Write an object.

        Args:
            key: Object key
            body: Object content
            content_type: MIME type
            metadata: Optional user metadata

        Returns:
            str: Object URL

        Raises:
            ObjectStoreError: When the write fails
        """
        data = body.encode("utf-8") if isinstance(body, str) else body
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Failed to upload to S3: {e}", key) from e

        logger.info(
            "put - Stored object",
            extra={"bucket": self._bucket, "key": key, "bytes": len(data)},
        )
        return self.object_url(key)

    def get(self, key: str) -> bytes:
        """
        Read an object.

        Raises:
            ObjectStoreError: Object missing or read failed
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise ObjectStoreError(f"File not found in S3: {key}", key) from e
            raise ObjectStoreError(f"Failed to download from S3: {e}", key) from e
        except BotoCoreError as e:
            raise ObjectStoreError(f"Failed to download from S3: {e}", key) from e

    def delete(self, key: str, bucket: str | None = None) -> None:
        """
        Delete an object (used for rejected zero-byte uploads).

        Raises:
            ObjectStoreError: When the delete fails
        """
        target = bucket or self._bucket
        try:
            self._s3_client.delete_object(Bucket=target, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"Failed to delete from S3: {e}", key) from e

        logger.info("delete - Deleted object", extra={"bucket": target, "key": key})

    def store_extracted_text(
        self, prefix: str, user_id: str, text: str, timestamp: str | None = None
    ) -> StageResult:
        """Store raw OCR text and describe it as a stage result."""
        key = artifact_key(prefix, user_id, timestamp or artifact_timestamp(), EXTRACTED_TEXT_SUFFIX)
        url = self.put(
            key,
            text,
            content_type="text/plain; charset=utf-8",
            metadata={
                "extracted_at": datetime.now(timezone.utc).isoformat(),
                "text_length": str(len(text)),
            },
        )
        return StageResult.stored(object_key=key, url=url, length=len(text))

    def store_summary(
        self, prefix: str, user_id: str, document: dict[str, Any], timestamp: str | None = None
    ) -> StageResult:
        """Store the summary artifact as JSON and describe it as a stage result."""
        key = artifact_key(prefix, user_id, timestamp or artifact_timestamp(), AI_SUMMARY_SUFFIX)
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        url = self.put(key, payload, content_type="application/json; charset=utf-8")
        return StageResult.stored(object_key=key, url=url, length=len(payload))
