"""Toolchain archive acquisition: transports, fetching and extraction."""

from .extract import ArchiveExtractor, ExtractResult
from .fetch import ArchiveFetcher, FetchResult, archive_name, is_remote
from .http import (
    CommandHttpClient,
    HttpClient,
    HttpError,
    MockHttpClient,
    RealHttpClient,
    select_http_client,
)

__all__ = [
    "ArchiveExtractor",
    "ArchiveFetcher",
    "CommandHttpClient",
    "ExtractResult",
    "FetchResult",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "archive_name",
    "is_remote",
    "select_http_client",
]
