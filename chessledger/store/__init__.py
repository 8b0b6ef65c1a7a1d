"""Content-addressed off-chain storage for record payloads."""

from .filesystem import FilesystemContentStore
from .http_client import HTTPContentStore
from .interface import ContentStore

__all__ = ["ContentStore", "FilesystemContentStore", "HTTPContentStore"]
