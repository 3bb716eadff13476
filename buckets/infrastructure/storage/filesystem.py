"""
Filesystem-backed object store.

Layout under the configured root:

    <root>/<bucket>/<id>.json     metadata record
    <root>/<bucket>/<id>.bktobj   raw payload

A bucket is just a directory; it exists only while it holds objects.
There is no cache. Every call reads the filesystem, which makes the
filesystem the single source of truth and the only synchronization
point between concurrent requests.

Write order on create is payload first, then metadata via an atomic
rename, so a reader that finds a metadata record always finds the
payload it describes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ...core.objects.errors import (
    BucketNotFound,
    IntegrityError,
    ObjectNotFound,
    StorageIoError,
)
from ...core.objects.identifiers import IdentifierGenerator, IdGenerator
from ...core.objects.models import BucketObject, ObjectMetadata
from ...core.objects.names import (
    validate_bucket_name,
    validate_mime_type,
    validate_object_id,
)

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".json"
PAYLOAD_SUFFIX = ".bktobj"
TEMP_SUFFIX = ".tmp"


class FilesystemObjectStore:
    """
    Object store rooted at a local directory.

    Holds nothing but the root path and an id generator, so one instance
    can serve concurrent requests. No file handle outlives a call.
    The constructor does not touch the filesystem.
    """

    def __init__(
        self,
        root: Union[str, Path],
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self._root = Path(root)
        self._ids = id_generator or IdentifierGenerator()

    @property
    def root(self) -> Path:
        return self._root

    # -----------------------------------------------------------------------
    # Listing
    # -----------------------------------------------------------------------

    def list_buckets(self) -> list[str]:
        """
        Names of all bucket directories, sorted.

        A root that has not been created yet holds no buckets.
        """
        try:
            buckets = [entry.name for entry in self._root.iterdir() if entry.is_dir()]
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(
                "Failed to list buckets",
                extra={"root": str(self._root), "error": str(e)}
            )
            raise StorageIoError(f"Listing buckets failed: {e}") from e

        return sorted(buckets)

    def list_objects(self, bucket: str) -> list[str]:
        """Ids of the objects in a bucket, sorted."""
        bucket = validate_bucket_name(bucket)
        bucket_dir = self._root / bucket

        try:
            entries = list(bucket_dir.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            raise BucketNotFound(bucket) from None
        except OSError as e:
            logger.error(
                "Failed to list objects",
                extra={"bucket": bucket, "error": str(e)}
            )
            raise StorageIoError(f"Listing objects failed: {e}") from e

        return sorted(
            entry.name[:-len(PAYLOAD_SUFFIX)]
            for entry in entries
            if entry.name.endswith(PAYLOAD_SUFFIX)
        )

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_metadata(
        self,
        bucket: str,
        object_id: str,
    ) -> Optional[tuple[ObjectMetadata, int]]:
        """
        Metadata record and payload size in bytes.

        Returns None when there is no metadata record. The size comes from
        the payload file's stat, the payload itself is not read.
        """
        bucket = validate_bucket_name(bucket)
        object_id = validate_object_id(object_id)
        metadata_path, payload_path = self._object_paths(bucket, object_id)

        raw = self._read_metadata_file(bucket, object_id, metadata_path)
        if raw is None:
            return None

        try:
            size = payload_path.stat().st_size
        except FileNotFoundError:
            raise self._missing_payload(bucket, object_id) from None
        except OSError as e:
            raise self._io_failure("stat payload", bucket, object_id, e) from e

        return self._parse_metadata(bucket, object_id, raw), size

    def get_object(
        self,
        bucket: str,
        object_id: str,
    ) -> Optional[BucketObject]:
        """Metadata record and full payload, or None when absent."""
        found = self.get_metadata(bucket, object_id)
        if found is None:
            return None

        metadata, _ = found
        _, payload_path = self._object_paths(bucket, object_id)

        try:
            data = payload_path.read_bytes()
        except FileNotFoundError:
            raise self._missing_payload(bucket, object_id) from None
        except OSError as e:
            raise self._io_failure("read payload", bucket, object_id, e) from e

        logger.debug(
            "Read object",
            extra={"bucket": bucket, "object_id": object_id, "size_bytes": len(data)}
        )

        return BucketObject(metadata=metadata, data=data)

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def create_object(
        self,
        bucket: str,
        name: str,
        mime_type: str,
        data: bytes,
    ) -> str:
        """
        Store a new object and return its generated id.

        The payload is created exclusively, so an id taken by a concurrent
        writer between the existence check and the write is detected and
        a new id is drawn.
        """
        bucket = validate_bucket_name(bucket)
        mime_type = validate_mime_type(mime_type)
        bucket_dir = self._root / bucket

        while True:
            object_id = self._ids.generate(bucket)
            metadata_path, payload_path = self._object_paths(bucket, object_id)

            try:
                in_use = metadata_path.exists() or payload_path.exists()
                if not in_use:
                    bucket_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise self._io_failure("prepare object", bucket, object_id, e) from e

            if in_use:
                logger.warning(
                    "Generated object id already in use",
                    extra={"bucket": bucket, "object_id": object_id}
                )
                continue

            try:
                payload_file = open(payload_path, "xb")
            except FileExistsError:
                continue
            except FileNotFoundError:
                # Bucket emptied and removed by a concurrent delete
                continue
            except OSError as e:
                raise self._io_failure("create payload", bucket, object_id, e) from e

            break

        try:
            with payload_file:
                payload_file.write(data)
        except OSError as e:
            self._discard(payload_path)
            raise self._io_failure("write payload", bucket, object_id, e) from e

        metadata = ObjectMetadata(
            id=object_id,
            bucket=bucket,
            name=name or "",
            mime_type=mime_type,
        )

        try:
            self._write_metadata_file(metadata_path, metadata)
        except OSError as e:
            self._discard(payload_path)
            raise self._io_failure("write metadata", bucket, object_id, e) from e

        logger.info(
            "Created object",
            extra={
                "bucket": bucket,
                "object_id": object_id,
                "mime_type": mime_type,
                "size_bytes": len(data),
            }
        )

        return object_id

    def delete_object(self, bucket: str, object_id: str) -> bool:
        """
        Remove an object, then its bucket if that was the last object.

        Payload goes first, then metadata. Removing the empty bucket is
        best-effort: a concurrent create may have repopulated it.
        """
        if self.get_metadata(bucket, object_id) is None:
            raise ObjectNotFound(bucket, object_id)

        metadata_path, payload_path = self._object_paths(bucket, object_id)

        try:
            payload_path.unlink()
            metadata_path.unlink()
        except FileNotFoundError:
            # Lost a race with another delete of the same object
            raise ObjectNotFound(bucket, object_id) from None
        except OSError as e:
            raise self._io_failure("delete object", bucket, object_id, e) from e

        logger.info(
            "Deleted object",
            extra={"bucket": bucket, "object_id": object_id}
        )

        self._remove_bucket_if_empty(self._root / bucket)

        return True

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _object_paths(self, bucket: str, object_id: str) -> tuple[Path, Path]:
        """Metadata and payload paths for already-validated names."""
        bucket_dir = self._root / bucket
        return (
            bucket_dir / f"{object_id}{METADATA_SUFFIX}",
            bucket_dir / f"{object_id}{PAYLOAD_SUFFIX}",
        )

    def _read_metadata_file(
        self,
        bucket: str,
        object_id: str,
        metadata_path: Path,
    ) -> Optional[str]:
        try:
            return metadata_path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise self._io_failure("read metadata", bucket, object_id, e) from e

    def _parse_metadata(self, bucket: str, object_id: str, raw: str) -> ObjectMetadata:
        try:
            return ObjectMetadata.from_record(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                "Corrupt metadata record",
                extra={"bucket": bucket, "object_id": object_id, "error": str(e)}
            )
            raise IntegrityError(
                bucket,
                object_id,
                f"Metadata record for '{object_id}' in '{bucket}' is unreadable",
            ) from e

    def _write_metadata_file(self, metadata_path: Path, metadata: ObjectMetadata) -> None:
        """Write to a temporary sibling, then rename over the final name."""
        temp_path = metadata_path.with_name(f".{metadata_path.name}{TEMP_SUFFIX}")
        try:
            temp_path.write_text(json.dumps(metadata.to_record()), encoding="utf-8")
            os.replace(temp_path, metadata_path)
        except OSError:
            self._discard(temp_path)
            raise

    def _remove_bucket_if_empty(self, bucket_dir: Path) -> None:
        try:
            if any(bucket_dir.iterdir()):
                return
            bucket_dir.rmdir()
        except OSError as e:
            logger.debug(
                "Bucket not removed",
                extra={"bucket": bucket_dir.name, "error": str(e)}
            )
            return

        logger.info("Removed empty bucket", extra={"bucket": bucket_dir.name})

    def _discard(self, path: Path) -> None:
        """Remove a partially written file after a failed create."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(
                "Failed to clean up partial write",
                extra={"path": str(path), "error": str(e)}
            )

    def _missing_payload(self, bucket: str, object_id: str) -> IntegrityError:
        logger.error(
            "Object metadata exists but payload does not",
            extra={"bucket": bucket, "object_id": object_id}
        )
        return IntegrityError(
            bucket,
            object_id,
            f"Object metadata exists but payload does not: {bucket}/{object_id}",
        )

    def _io_failure(
        self,
        action: str,
        bucket: str,
        object_id: str,
        error: OSError,
    ) -> StorageIoError:
        logger.error(
            f"Failed to {action}",
            extra={"bucket": bucket, "object_id": object_id, "error": str(error)}
        )
        return StorageIoError(f"Failed to {action}: {error}")
