"""Office Deployment Tool download discovery for odtrefresh.

Microsoft publishes the Office Deployment Tool (ODT) behind a download
center confirmation page. The page starts the download with script, and
also carries a fallback anchor whose text reads "click here to download
manually". That anchor's href is the only stable pointer to the current
build, so this module scrapes it:

1. GET the confirmation page
2. Walk every <a> element and compare its visible text with the marker
3. Return the first matching href (made absolute against the page URL)
4. Download the binary to the temp directory

Configuration (settings YAML):

    tool:
      page_url: "https://www.microsoft.com/en-us/download/confirmation.aspx?id=49117"
      link_text: "click here to download manually"
      temp_dir: "C:/Temp/ODT"

Matching rules:

- Visible text only, never the href or title attribute
- Case-insensitive, whitespace collapsed
- The marker may be a substring of the anchor text
- The first matching anchor wins

Error Handling:

- NetworkError: Page fetch failure, or no anchor matches the marker
- Errors are chained with 'from err' for better debugging

Example:
    ```python
    from pathlib import Path
    from odtrefresh.discovery import fetch_tool

    tool_path = fetch_tool(
        "https://www.microsoft.com/en-us/download/confirmation.aspx?id=49117",
        Path("C:/Temp/ODT"),
    )
    ```

"""

from __future__ import annotations

from pathlib import Path
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
import requests

from odtrefresh.exceptions import NetworkError
from odtrefresh.io import download_file, make_session

DEFAULT_PAGE_URL = (
    "https://www.microsoft.com/en-us/download/confirmation.aspx?id=49117"
)
DEFAULT_LINK_TEXT = "click here to download manually"

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip().lower()


def find_download_link(html: str, link_text: str = DEFAULT_LINK_TEXT) -> str | None:
    """Return the href of the first anchor whose text contains link_text.

    Args:
        html: Page HTML.
        link_text: Marker phrase to look for in the anchor's visible text.

    Returns:
        The raw href attribute, or None if no anchor matches.

    """
    marker = _normalize(link_text)
    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", href=True):
        if marker in _normalize(anchor.get_text(" ")):
            return anchor["href"]
    return None


def resolve_tool_url(
    page_url: str = DEFAULT_PAGE_URL,
    link_text: str = DEFAULT_LINK_TEXT,
    *,
    session: requests.Session | None = None,
    timeout: int = 30,
) -> str:
    """Find the current Office Deployment Tool download URL.

    Args:
        page_url: Download center confirmation page.
        link_text: Visible text of the manual download anchor.
        session: Optional session to reuse; a fresh one is opened and
            closed otherwise.
        timeout: Request timeout in seconds.

    Returns:
        Absolute URL of the tool binary.

    Raises:
        NetworkError: If the page can't be fetched or has no matching link.

    """
    from odtrefresh.logging import get_global_logger

    logger = get_global_logger()
    logger.verbose("DISCOVERY", f"Fetching page: {page_url}")

    owns_session = session is None
    if owns_session:
        session = make_session()
    try:
        response = session.get(page_url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.HTTPError as err:
        raise NetworkError(
            f"Failed to fetch page: {response.status_code} {response.reason}"
        ) from err
    except requests.exceptions.RequestException as err:
        raise NetworkError(f"Failed to fetch page: {err}") from err
    finally:
        if owns_session:
            session.close()

    html_content = response.text
    logger.debug("DISCOVERY", f"Page fetched ({len(html_content)} bytes)")

    href = find_download_link(html_content, link_text)
    if not href:
        raise NetworkError(
            f"No link with text {link_text!r} found on {page_url}"
        )

    download_url = urljoin(page_url, href)
    logger.verbose("DISCOVERY", f"Download URL: {download_url}")
    return download_url


def fetch_tool(
    page_url: str,
    temp_dir: Path,
    link_text: str = DEFAULT_LINK_TEXT,
) -> Path:
    """Resolve and download the latest Office Deployment Tool.

    Args:
        page_url: Download center confirmation page.
        temp_dir: Directory to download into (created if missing).
        link_text: Visible text of the manual download anchor.

    Returns:
        Path to the downloaded self-extractor.

    Raises:
        NetworkError: On any page or download failure.

    """
    url = resolve_tool_url(page_url, link_text)
    file_path, _digest, _headers = download_file(url, Path(temp_dir))
    return file_path
