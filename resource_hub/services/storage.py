"""Durable object storage for published resources.

Two backends share one small interface: ``LocalStorage`` writes under
``settings.upload_dir`` and is served by the ``/files`` route, ``S3Storage``
writes to a bucket through boto3.
"""

import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import StorageWriteFailure

logger = logging.getLogger(__name__)


def make_object_key(category: str, filename: str) -> str:
    """Build a unique key such as ``lab-manual/<uuid>.pdf``"""
    extension = os.path.splitext(filename or "")[1].lower()
    return f"{category}/{uuid.uuid4()}{extension}"


class LocalStorage:
    def __init__(self, root: str, base_url: str):
        self.root = os.path.abspath(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, key))
        if not path.startswith(self.root + os.sep):
            raise FileNotFoundError(key)
        return path

    def put(self, key: str, data: bytes, content_type: Optional[str] = None):
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error("Local storage write failed for %s: %s", key, e)
            if os.path.exists(path):
                os.remove(path)
            raise StorageWriteFailure(f"Failed to store {key}: {e}") from e

    def get(self, key: str) -> bytes:
        with open(self._path(key), "rb") as f:
            return f.read()

    def delete(self, key: str):
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"


class S3Storage:
    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url
        )
        if public_base_url:
            self.public_base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self.public_base_url = f"{endpoint_url.rstrip('/')}/{bucket}"
        else:
            region_part = f".{region}" if region else ""
            self.public_base_url = (
                f"https://{bucket}.s3{region_part}.amazonaws.com"
            )

    def put(self, key: str, data: bytes, content_type: Optional[str] = None):
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 put_object failed for %s: %s", key, e)
            raise StorageWriteFailure(f"Failed to store {key}: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(key) from e
            raise
        return response["Body"].read()

    def delete(self, key: str):
        self.client.delete_object(Bucket=self.bucket, Key=key)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"
