"""
HTTP(S) file download for odtrefresh.

Downloads the Office Deployment Tool binary once per run. There is no retry
adapter on the session: a failed download fails the fetch stage and the
next scheduled run tries again.

Key Features:

- **Atomic Writes** - Downloads to a temporary .part file and renames it on success, so a half-written tool never sits in the temp directory.
- **Stream Hashing** - SHA-256 is computed while writing, for the verbose log.
- **URL Filename** - The file is named after the final path segment of the (post-redirect) URL, e.g. officedeploymenttool_17928-20114.exe.
- **Scoped Session** - The requests.Session is used as a context manager and closed on every outcome.

Constants:

- DEFAULT_CHUNK (int): Stream chunk size (1 MiB).

Example:
    >>> from pathlib import Path
    >>> from odtrefresh.io import download_file
    >>> path, sha256, headers = download_file(
    ...     url="https://download.microsoft.com/.../officedeploymenttool_17928-20114.exe",
    ...     destination_folder=Path("C:/Temp/ODT"),
    ... )
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import time
from urllib.parse import urlparse

import requests

from odtrefresh.exceptions import NetworkError

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024

USER_AGENT = "odtrefresh/0.1"


def _filename_from_url(url: str) -> str:
    """
    Derive a filename from the URL path. Fallback to a generic name if empty.
    """
    name = Path(urlparse(url).path).name
    return name or "download.bin"


def make_session() -> requests.Session:
    """
    Create a requests.Session for vendor pages and binaries.

    - Sets a User-Agent; the download center rejects some default agents.
    - Forces 'Accept-Encoding: identity'; the tool is already compressed.
    - No retry adapter is mounted.
    """
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept-Encoding": "identity",
        }
    )
    return s


def download_file(
    url: str,
    destination_folder: Path,
    *,
    timeout: int = 120,
) -> tuple[Path, str, dict]:
    """Download a URL into destination_folder.

    The file is named from the last path segment of url itself, not of the
    URL reached after redirects. Writes to <filename>.part then renames to
    <filename> on success.

    Args:
        url: Source URL.
        destination_folder: Folder to save into (created if missing).
        timeout: Per-request timeout (seconds).

    Returns:
        A tuple (file_path, sha256_hex, headers_dict).

    Raises:
        NetworkError: For connection failures and non-2xx responses.
    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()

    destination_folder = Path(destination_folder)
    destination_folder.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    with make_session() as session:
        try:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
        except requests.RequestException as err:
            raise NetworkError(f"download failed for {url}: {err}") from err

        with resp:
            for hist in resp.history:
                logger.debug(
                    "HTTP",
                    f"Redirect {hist.status_code} -> {hist.headers.get('Location', 'unknown')}",
                )

            try:
                resp.raise_for_status()
            except requests.HTTPError as err:
                raise NetworkError(f"download failed for {url}: {err}") from err

            logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")

            target = destination_folder / _filename_from_url(url)
            tmp = target.with_suffix(target.suffix + ".part")
            logger.debug("FILE", f"Downloading to: {tmp}")

            sha = hashlib.sha256()
            started_at = time.time()
            try:
                with tmp.open("wb") as f:
                    for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                        if not chunk:
                            continue
                        f.write(chunk)
                        sha.update(chunk)
            except requests.RequestException as err:
                tmp.unlink(missing_ok=True)
                raise NetworkError(f"download interrupted for {url}: {err}") from err

            headers = dict(resp.headers)

    digest = sha.hexdigest()
    tmp.replace(target)

    elapsed = time.time() - started_at
    logger.verbose("FILE", f"Download complete: {target} in {elapsed:.1f}s")
    logger.debug("FILE", f"SHA-256: {digest}")

    return target, digest, headers
