import os
import json
import errno
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .config import PACKAGE_FILE, PROBE_EXTENSIONS
from .models import PackageDescriptor
from .utils import normalize_path

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_existing_extension(path: PathLike) -> str:
    """
    Returns the extension under which `path` (given without one) exists on disk.

    The order is fixed because several candidates may coexist: index.html
    wins for index files, html is the last resort for everything else.

    Raises:
        FileNotFoundError: nothing exists under any candidate extension.
    """
    base = str(path)
    is_index = os.path.basename(base) == "index"

    if is_index and os.path.exists(f"{base}.html"):
        return ".html"
    for ext in PROBE_EXTENSIONS:
        if os.path.exists(f"{base}{ext}"):
            return ext
    if os.path.exists(base):
        return ""
    if not is_index and os.path.exists(f"{base}.html"):
        return ".html"
    raise FileNotFoundError(errno.ENOENT, f"File {base} not found", base)


class PackageCache:
    """
    Memoizes package.json descriptors by package directory.

    Entries are never invalidated; packages are assumed static for the
    lifetime of a dev session. Populating the same directory twice is
    harmless, so no locking is done.
    """

    def __init__(self):
        self._descriptors: Dict[str, PackageDescriptor] = {}

    def __contains__(self, directory: PathLike) -> bool:
        return normalize_path(str(directory)) in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    @staticmethod
    def locate_package_root(directory: PathLike) -> Optional[Path]:
        """Walks up from `directory` to the nearest folder holding a package.json."""
        current = Path(directory).resolve()
        while True:
            if (current / PACKAGE_FILE).exists():
                return current
            parent = current.parent
            if parent == current:
                return None
            current = parent

    def read_descriptor(self, directory: PathLike, search: bool = True) -> PackageDescriptor:
        """
        Reads (and caches) the descriptor of the package owning `directory`.

        Args:
            directory: A package directory, or any directory inside one when
                       `search` is True.
            search: Walk up to the nearest package root first.

        Returns:
            The descriptor, or an empty one when there is no package.json or
            it cannot be parsed.
        """
        if search:
            root = self.locate_package_root(directory)
            if root is None:
                return PackageDescriptor()
        else:
            root = Path(directory)

        key = normalize_path(str(root))
        if key in self._descriptors:
            return self._descriptors[key]

        try:
            with open(root / PACKAGE_FILE, 'r', encoding='utf-8') as f:
                data = json.load(f)
            descriptor = PackageDescriptor.from_package_json(data)
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable descriptor in {root}: {e}")
            return PackageDescriptor()

        self._descriptors[key] = descriptor
        return descriptor

    def resolve_package_main(self, directory: PathLike, search: bool = False) -> str:
        """
        Default entry file of a package, relative to its root.

        Priority: `module`, a whole-package `browser` path, a `browser`
        substitution for `main`, `main`, then whatever index.* exists.
        """
        root = Path(directory)
        if search:
            root = self.locate_package_root(directory) or root

        pkg = self.read_descriptor(root, search=False)
        if pkg.module:
            return pkg.module
        if pkg.browser_is_path:
            return pkg.browser
        if pkg.browser_is_map and pkg.main:
            for key in (f"./{pkg.main}", pkg.main):
                substitute = pkg.browser.get(key)
                if isinstance(substitute, str) and substitute:
                    return substitute
        if pkg.main:
            return pkg.main
        return f"index{find_existing_extension(root / 'index')}"

    def get_src(self, root: PathLike) -> str:
        """Source directory of a project, relative to its root."""
        root = Path(root)
        pkg = self.read_descriptor(root)
        if pkg.module:
            return os.path.dirname(pkg.module) or "."
        if (root / "src" / "index.html").exists():
            return "src"
        if (root / "index.html").exists():
            return "."
        if (root / "src").exists():
            return "src"
        if pkg.main:
            return os.path.dirname(pkg.main) or "."
        return "."
