import os
import re
import socket
import logging
from pathlib import Path, PurePath
from typing import Mapping, Optional
from urllib.parse import quote

from .config import VENDOR_ROOT
from .models import Version

logger = logging.getLogger(__name__)

_DRIVE_RE = re.compile(r"^/?[a-zA-Z]:")
_NUMBER_RE = re.compile(r"\d+")


def normalize_path(path: str) -> str:
    """
    Returns a canonical absolute POSIX path.
    On Windows, it ensures the drive letter is consistently lowercased so
    descriptor cache keys do not split on casing.
    """
    if not path:
        return ""

    path_str = Path(path).resolve().as_posix()

    if os.name == 'nt' and len(path_str) > 1 and path_str[1] == ':':
        path_str = path_str[0].lower() + path_str[1:]

    return path_str


def path_to_url(path: str) -> str:
    """Filesystem path -> URL path (forward slashes, no drive letter, percent-encoded)."""
    posix = PurePath(path).as_posix()
    return quote(_DRIVE_RE.sub("", posix), safe="/@:+,;=~!$&'()*")


def url_to_path(url_path: str) -> str:
    """URL path -> host separator. No-op on POSIX hosts."""
    if os.sep == "\\":
        return url_path.replace("/", "\\")
    return url_path


def get_module_path(path: str) -> str:
    """
    Returns the vendor-relative request path of a file inside node_modules.

    Nested vendor trees collapse to the innermost one, e.g.
    /app/node_modules/a/node_modules/b/index.js -> /node_modules/b/index.js
    """
    parts = path_to_url(path).split(VENDOR_ROOT)
    return f"{VENDOR_ROOT}{parts[-1]}"


def get_version(dependencies: Optional[Mapping[str, str]], name: str) -> Optional[Version]:
    """
    Parses the declared range of a dependency (e.g. "^2.6.10") into a Version.

    Returns None when the mapping or the dependency is missing, or the range
    carries no numbers.
    """
    if not dependencies:
        return None
    spec = dependencies.get(name)
    if not spec:
        return None
    numbers = [int(n) for n in _NUMBER_RE.findall(spec)[:3]]
    if not numbers:
        return None
    return Version(**dict(zip(("major", "minor", "patch"), numbers)))


def get_local_ip() -> Optional[str]:
    """First non-loopback IPv4 address of this host, for display only."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packets are sent; connect only selects the outbound interface
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError as e:
        logger.debug(f"Could not determine local IP: {e}")
        return None
    finally:
        sock.close()
    if address.startswith("127."):
        return None
    return address
