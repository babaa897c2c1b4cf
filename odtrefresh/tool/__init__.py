"""Office Deployment Tool handling for odtrefresh.

Modules:

extract : module
    Self-extract the downloaded tool into a version-named folder.
reconcile : module
    Replace the staged setup.exe when the extracted one is newer.
cleanup : module
    Remove the temporary download and extraction folder.

"""

from .cleanup import clean_temp
from .extract import SETUP_EXE, extract_tool
from .reconcile import reconcile_tool

__all__ = ["SETUP_EXE", "clean_temp", "extract_tool", "reconcile_tool"]
