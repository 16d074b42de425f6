"""
MinioClient protocol definition.

This module defines the protocol interface that both the real Minio client
and our fake test client must implement. The document store depends on
this abstraction rather than on ``minio.Minio`` directly.
"""

from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable

from minio.datatypes import Object


@runtime_checkable
class MinioClient(Protocol):
    """
    Protocol defining the MinIO client interface used by the store.

    This protocol captures only the methods we actually use, making our
    dependency explicit and testable. Both the real minio.Minio client and
    the FakeMinioClient used in tests implement this protocol.
    """

    def bucket_exists(self, bucket_name: str) -> bool:
        """Check if a bucket exists."""
        ...

    def make_bucket(self, bucket_name: str) -> None:
        """Create a bucket.

        Raises:
            S3Error: If bucket creation fails
        """
        ...

    def put_object(
        self,
        bucket_name: str,
        object_name: str,
        data: Any,
        length: int,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Store an object in the bucket.

        Raises:
            S3Error: If object storage fails
        """
        ...

    def get_object(self, bucket_name: str, object_name: str) -> Any:
        """Retrieve an object; the response must be closed and released.

        Raises:
            S3Error: If object retrieval fails (e.g., NoSuchKey)
        """
        ...

    def stat_object(self, bucket_name: str, object_name: str) -> Object:
        """Get object metadata without retrieving the object data.

        Raises:
            S3Error: If object doesn't exist (NoSuchKey) or other errors
        """
        ...

    def remove_object(self, bucket_name: str, object_name: str) -> None:
        """Remove an object from the bucket."""
        ...

    def list_objects(
        self,
        bucket_name: str,
        prefix: Optional[str] = None,
        recursive: bool = False,
    ) -> Iterator[Object]:
        """List objects, optionally under a prefix."""
        ...
