"""Remote API access — credential store, HTTP client, object storage."""

from tasktracker.client.api import ApiClient, error_message, token_expires_within
from tasktracker.client.storage import CredentialStore
from tasktracker.client.uploads import FileUpload, ObjectStorage, read_upload

__all__ = [
    "ApiClient",
    "CredentialStore",
    "FileUpload",
    "ObjectStorage",
    "error_message",
    "read_upload",
    "token_expires_within",
]
