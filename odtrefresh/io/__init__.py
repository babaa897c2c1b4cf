"""Input/Output operations for odtrefresh.

Modules:

download : module
    HTTP(S) file download with atomic writes and stream hashing.

Public API:

download_file : function
    Download a file from a URL into a folder.
make_session : function
    Build the requests.Session used for vendor pages and downloads.

Example:
    from pathlib import Path
    from odtrefresh.io import download_file

    file_path, sha256, headers = download_file(
        url="https://example.com/officedeploymenttool.exe",
        destination_folder=Path("C:/Temp/ODT"),
    )

"""

from .download import download_file, make_session

__all__ = ["download_file", "make_session"]
