import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

from ..config import PACKAGE_FILE, VENDOR_DIR
from ..models import PackageDescriptor, Resolution, Substitution, SubstitutionKind
from ..packages import PackageCache
from .base import ModuleResolutionError, ModuleResolver

logger = logging.getLogger(__name__)

PackageFilter = Callable[[PackageDescriptor], Substitution]


def default_package_filter(pkg: PackageDescriptor) -> Substitution:
    return Substitution.default(pkg.main)


class NodeResolver(ModuleResolver):
    """
    Node-style resolution.
    Handles:
    - Bare specifiers, searched in every node_modules from `basedir` outward
    - Relative and absolute specifiers, resolved against `basedir`
    - File candidates: the exact path, then each extension in order
    - Directory candidates: the package entry, then index.<ext>

    Every package met on the way is passed through a package filter before
    any file inside it is probed. The filter's Substitution decides whether
    the walk proceeds as usual, is redirected to another file of the package,
    or stops because the module is disabled.
    """

    def __init__(self, extensions: Iterable[str], cache: Optional[PackageCache] = None):
        super().__init__(extensions)
        self.cache = cache if cache is not None else PackageCache()

    def resolve(
        self,
        basedir: Union[str, Path],
        specifier: str,
        package_filter: PackageFilter = default_package_filter,
        directory_only: bool = False,
    ) -> Resolution:
        """
        Resolves `specifier` from `basedir`.

        With `directory_only`, candidates are only loaded as package
        directories; the specifier itself is never probed as a file.
        """
        basedir = Path(basedir).resolve()
        if self._is_relative(specifier):
            candidates = [basedir / specifier]
        else:
            candidates = [modules / specifier for modules in self.node_modules_paths(basedir)]

        for candidate in candidates:
            resolution = None if directory_only else self._load_as_file(candidate, package_filter)
            if resolution is None:
                resolution = self._load_as_directory(candidate, package_filter)
            if resolution is not None:
                return resolution

        raise ModuleResolutionError(specifier, basedir)

    @staticmethod
    def node_modules_paths(basedir: Path) -> Iterator[Path]:
        """node_modules directories to search, nearest first."""
        for directory in (basedir, *basedir.parents):
            if directory.name == VENDOR_DIR:
                continue
            yield directory / VENDOR_DIR

    @staticmethod
    def package_dir_of(directory: Path) -> Optional[Path]:
        """Nearest package root at or above `directory` without leaving its vendor package."""
        for current in (directory, *directory.parents):
            if current.name == VENDOR_DIR:
                return None
            if (current / PACKAGE_FILE).is_file():
                return current
        return None

    @staticmethod
    def entry_of(main: Optional[str]) -> Optional[str]:
        """A main of "." or "./" names the package's own index."""
        if main in (".", "./"):
            return "index"
        return main

    @staticmethod
    def filter_path(pkg_dir: Path, candidate: Path, substitution: Substitution) -> Path:
        """A rewritten entry replaces the candidate; otherwise the candidate stands."""
        if substitution.kind is SubstitutionKind.CONTINUE:
            return pkg_dir / NodeResolver.entry_of(substitution.main)
        return candidate

    def _load_as_file(self, base: Path, package_filter: PackageFilter) -> Optional[Resolution]:
        pkg_dir = self.package_dir_of(base.parent)
        if pkg_dir is not None:
            substitution = package_filter(self.cache.read_descriptor(pkg_dir, search=False))
            if substitution.kind is SubstitutionKind.DISABLED:
                return Resolution(disabled=True)
            base = self.filter_path(pkg_dir, base, substitution)

        found = self._probe(base)
        if found is None:
            return None
        return Resolution(path=self._normalize(found))

    def _load_as_directory(self, directory: Path, package_filter: PackageFilter) -> Optional[Resolution]:
        if not directory.is_dir():
            return None

        if (directory / PACKAGE_FILE).is_file():
            substitution = package_filter(self.cache.read_descriptor(directory, search=False))
            if substitution.kind is SubstitutionKind.DISABLED:
                return Resolution(disabled=True)

            main = self.entry_of(substitution.main)
            if main:
                entry = directory / main
                resolution = self._load_as_file(entry, package_filter)
                if resolution is not None:
                    return resolution
                if entry.resolve() != directory.resolve():
                    resolution = self._load_as_directory(entry, package_filter)
                    if resolution is not None:
                        return resolution
                logger.debug(f"Entry '{main}' of {directory} not found, trying index")

        return self._load_as_file(directory / "index", package_filter)
