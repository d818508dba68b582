"""Backend client implementations."""

from share_store.backends._dropbox import DropboxClient
from share_store.backends._local import LocalClient
from share_store.backends._s3 import S3Client

__all__ = ["DropboxClient", "LocalClient", "S3Client"]
