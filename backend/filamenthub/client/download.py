"""Download a profile file, trying several strategies in order.

1. Stream the file URL straight to disk.
2. Fetch the whole body through the API's ``/download`` endpoint.
3. Open the URL in a browser tab and let the user save it.

If every strategy fails, ``DownloadFailedError`` is raised.
"""
from __future__ import annotations

import webbrowser
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import requests
from loguru import logger

from .api_client import ApiClientError, ProfileApiClient


class DownloadFailedError(Exception):
    pass


def _target(dest_dir: str | Path, file_name: str) -> Path:
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    return dest / Path(file_name).name


def direct_download(
    file_url: str,
    file_name: str,
    dest_dir: str | Path,
    session: Optional[requests.Session] = None,
    chunk_size: int = 64 * 1024,
) -> Path:
    session = session or requests.Session()
    path = _target(dest_dir, file_name)
    partial = path.with_name(path.name + ".part")
    try:
        with session.get(file_url, stream=True, timeout=30) as resp:
            resp.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
    except Exception:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(path)
    return path


def api_download(client: ProfileApiClient, profile_id: str, file_name: str, dest_dir: str | Path) -> Path:
    content = client.download_content(profile_id)
    path = _target(dest_dir, file_name)
    path.write_bytes(content)
    return path


def open_in_browser(file_url: str) -> None:
    if not webbrowser.open_new_tab(file_url):
        raise DownloadFailedError("no browser available")


def download_profile_file(
    file_url: str,
    file_name: str,
    dest_dir: str | Path,
    *,
    profile_id: Optional[str] = None,
    client: Optional[ProfileApiClient] = None,
    session: Optional[requests.Session] = None,
    opener: Callable[[str], None] = open_in_browser,
) -> Optional[Path]:
    """Return the saved path, or None when the file was handed to a browser tab."""
    attempts: List[Tuple[str, Exception]] = []

    logger.info("Starting download for {} from {}", file_name, file_url)
    try:
        return direct_download(file_url, file_name, dest_dir, session=session)
    except (requests.RequestException, OSError) as e:
        logger.info("Direct download failed, trying the API endpoint: {}", e)
        attempts.append(("direct", e))

    if client is not None and profile_id:
        try:
            return api_download(client, profile_id, file_name, dest_dir)
        except (ApiClientError, OSError) as e:
            logger.warning("API download failed: {}", e)
            attempts.append(("api", e))

    logger.info("All download methods failed, opening {} in a browser tab", file_url)
    try:
        opener(file_url)
        return None
    except (webbrowser.Error, DownloadFailedError) as e:
        attempts.append(("browser", e))
        logger.error("Even opening in a new tab failed: {}", e)
    raise DownloadFailedError(
        "All download methods failed: " + "; ".join(f"{name}: {err}" for name, err in attempts)
    )
