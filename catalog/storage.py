"""Persistence backends for the catalog CSV blobs.

A backend stores whole blobs under string keys, the same way browser local
storage does. Each write also records a companion ``<key>_timestamp`` so
callers can tell when the blob was last saved.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from catalog.config import AWS_REGION, S3_BUCKET, S3_PREFIX, STORAGE_BACKEND, STORE_DB_PATH
from catalog.errors import StorageError
from catalog.logging_config import get_logger
from catalog.models import now_iso

__all__ = [
    "StorageBackend",
    "SQLiteStorage",
    "S3Storage",
    "create_storage",
    "timestamp_key",
]

logger = get_logger(__name__)


def timestamp_key(key: str) -> str:
    return f"{key}_timestamp"


class StorageBackend:
    """Interface for blob storage keyed by name."""

    def read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def write(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def timestamp(self, key: str) -> Optional[str]:
        raise NotImplementedError


class SQLiteStorage(StorageBackend):
    """Key/value blobs in a single SQLite table."""

    def __init__(self, db_path: str = STORE_DB_PATH):
        self.db_path = str(db_path)
        self._init_db()

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self.db_path, timeout=10)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open store database {self.db_path}: {e}") from e
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        try:
            with self._connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialize store database {self.db_path}: {e}") from e

    def _get(self, key: str) -> Optional[str]:
        try:
            with self._connection() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e
        return row[0] if row else None

    def read(self, key: str) -> Optional[str]:
        return self._get(key)

    def write(self, key: str, value: str) -> None:
        now = now_iso()
        try:
            with self._connection() as conn:
                conn.executemany(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    [(key, value, now), (timestamp_key(key), now, now)],
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e
        logger.debug("Saved %d characters under '%s'", len(value), key)

    def delete(self, key: str) -> None:
        try:
            with self._connection() as conn:
                conn.execute("DELETE FROM kv_store WHERE key IN (?, ?)", (key, timestamp_key(key)))
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete '{key}': {e}") from e

    def timestamp(self, key: str) -> Optional[str]:
        return self._get(timestamp_key(key))


class S3Storage(StorageBackend):
    """Blobs stored as objects in an S3 bucket.

    Keys map to ``<prefix>/<key>.csv`` objects; the timestamp comes from the
    object's ``LastModified``.
    """

    def __init__(
        self,
        bucket: str = S3_BUCKET,
        prefix: str = S3_PREFIX,
        client: Optional[Any] = None,
        region: str = AWS_REGION,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.s3_client = client or boto3.client(
            "s3",
            region_name=region,
            config=Config(signature_version="s3v4"),
        )
        logger.info("S3Storage initialized for bucket: %s", self.bucket)

    def _object_key(self, key: str) -> str:
        filename = f"{key}.csv"
        return f"{self.prefix}/{filename}" if self.prefix else filename

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        code = error.response.get("Error", {}).get("Code", "")
        return code in ("NoSuchKey", "404", "NotFound")

    def read(self, key: str) -> Optional[str]:
        object_key = self._object_key(key)
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=object_key)
            return response["Body"].read().decode("utf-8")
        except ClientError as e:
            if self._is_missing(e):
                return None
            logger.error("Failed to download s3://%s/%s: %s", self.bucket, object_key, e)
            raise StorageError(f"Failed to read '{key}' from S3: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to read '{key}' from S3: {e}") from e

    def write(self, key: str, value: str) -> None:
        object_key = self._object_key(key)
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=value.encode("utf-8"),
                ContentType="text/csv",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload s3://%s/%s: %s", self.bucket, object_key, e)
            raise StorageError(f"Failed to write '{key}' to S3: {e}") from e
        logger.info("Uploaded s3://%s/%s", self.bucket, object_key)

    def delete(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=self._object_key(key))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete '{key}' from S3: {e}") from e

    def timestamp(self, key: str) -> Optional[str]:
        try:
            response = self.s3_client.head_object(Bucket=self.bucket, Key=self._object_key(key))
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise StorageError(f"Failed to stat '{key}' on S3: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to stat '{key}' on S3: {e}") from e
        modified = response.get("LastModified")
        return modified.isoformat() if modified is not None else None


def create_storage(backend: str = STORAGE_BACKEND) -> StorageBackend:
    """Build the configured storage backend ("sqlite" or "s3")."""
    if backend == "s3":
        return S3Storage()
    if backend == "sqlite":
        return SQLiteStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
