"""Storage integration using fsspec for filesystem abstraction.

Provides unified access to the local filesystem, in-memory storage and cloud
storage (S3, GCS) through fsspec's protocol detection.
"""

import asyncio
import os
from urllib.parse import urlparse

import fsspec


def get_filesystem(url: str) -> fsspec.AbstractFileSystem:
    """Get filesystem for URL, auto-detecting protocol.

    Args:
        url: Storage URL (file://, memory://, s3://, gs://, or local path)

    Returns:
        Filesystem instance for the protocol

    Examples:
        get_filesystem("s3://bucket/path") -> S3FileSystem
        get_filesystem("/local/path") -> LocalFileSystem
        get_filesystem("memory://budget") -> MemoryFileSystem
    """
    parsed = urlparse(url)

    if not parsed.scheme or parsed.scheme == "file":
        return fsspec.filesystem("file")

    return fsspec.filesystem(parsed.scheme)


def build_full_path(url: str, path: str) -> str:
    """Build full path from base URL and relative path.

    Args:
        url: Base storage URL
        path: Relative path within storage

    Returns:
        Full path for filesystem operations
    """
    parsed = urlparse(url)

    if not parsed.scheme or parsed.scheme == "file":
        base = parsed.path if parsed.path else url
        if path:
            return os.path.join(base, path)
        return base

    base = f"{parsed.netloc}{parsed.path}" if parsed.netloc else parsed.path
    if path:
        return f"{base.rstrip('/')}/{path.lstrip('/')}"
    return base


def file_exists(url: str, path: str = "") -> bool:
    """Check whether a file exists in storage."""
    fs = get_filesystem(url)
    return bool(fs.exists(build_full_path(url, path)))


async def read_file(url: str, path: str = "") -> bytes:
    """Read file bytes from storage.

    Args:
        url: Base storage URL
        path: File path within storage (optional if url is full path)

    Returns:
        File contents as bytes

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    fs = get_filesystem(url)
    full_path = build_full_path(url, path)

    return await asyncio.to_thread(_read_file_sync, fs, full_path)


def _read_file_sync(fs: fsspec.AbstractFileSystem, path: str) -> bytes:
    """Read file contents synchronously."""
    with fs.open(path, "rb") as f:
        return f.read()


async def write_file(url: str, path: str, content: bytes) -> str:
    """Write file bytes to storage.

    Args:
        url: Base storage URL
        path: File path within storage
        content: File contents as bytes

    Returns:
        Full storage path written to.
    """
    fs = get_filesystem(url)
    full_path = build_full_path(url, path)
    parsed = urlparse(url)
    if not parsed.scheme or parsed.scheme == "file":
        directory = os.path.dirname(full_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
    await asyncio.to_thread(_write_file_sync, fs, full_path, content)
    return full_path


def _write_file_sync(
    fs: fsspec.AbstractFileSystem, path: str, content: bytes
) -> None:
    """Write file contents synchronously."""
    with fs.open(path, "wb") as f:
        f.write(content)


async def remove_file(url: str, path: str = "") -> None:
    """Remove a file from storage; missing files are ignored."""
    fs = get_filesystem(url)
    full_path = build_full_path(url, path)
    if fs.exists(full_path):
        await asyncio.to_thread(fs.rm, full_path)
