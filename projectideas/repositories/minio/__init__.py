"""
Minio repository implementations for projectideas.

Document store persisting each document as a JSON object in MinIO, one
bucket per container.
"""

from .client import MinioClient
from .store import MinioDocumentStore

__all__ = [
    "MinioClient",
    "MinioDocumentStore",
]
