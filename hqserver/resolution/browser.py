import logging
import posixpath
from functools import partial
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ..config import BUILTIN_MODULES, EMPTY_MODULE, HQ_ROOT, RESOLVE_EXTENSIONS, VENDOR_ROOT
from ..models import PackageDescriptor, Substitution
from ..packages import PackageCache
from .base import ModuleResolutionError, ModuleResolver
from .node import NodeResolver

logger = logging.getLogger(__name__)

# Keys tried against a package's browser map, in priority order
BROWSER_KEY_VARIANTS: List[Callable[[str], str]] = [
    lambda path: path,
    lambda path: f"./{path}",
    lambda path: f"./{path}.js",
    lambda path: f"./{posixpath.splitext(path)[0]}.js",
]


def split_specifier(specifier: str) -> Tuple[str, str, str]:
    """
    Splits a request into (module specifier, package name, sub-path).

    Only the part after the last /node_modules/ counts:
    "/node_modules/lodash/fp/map.js" -> ("lodash/fp/map.js", "lodash", "fp/map.js").
    Scoped packages keep their scope: "@babel/runtime/helpers" ->
    ("@babel/runtime/helpers", "@babel/runtime", "helpers").
    """
    mod_name = specifier.split(VENDOR_ROOT)[-1]
    segments = mod_name.split("/")
    size = 2 if mod_name.startswith("@") else 1
    return mod_name, "/".join(segments[:size]), "/".join(segments[size:])


def lookup_browser_map(browser: dict, path: str) -> Optional[Substitution]:
    """
    Looks `path` up in a browser map under each key variant.

    Returns a rewrite for a string entry, `disabled` for a `false` entry,
    or None when no variant has an entry.
    """
    for variant in BROWSER_KEY_VARIANTS:
        value = browser.get(variant(path))
        if isinstance(value, str):
            return Substitution.rewrite(value)
        if value is False:
            return Substitution.disabled()
    return None


class BrowserResolver(ModuleResolver):
    """
    Resolves imports the way a browser bundle sees them.

    Wraps NodeResolver and applies the `browser` field of every package it
    meets: a string replaces the package entry, a map redirects individual
    files, and a `false` entry disables a module in favor of an empty one.
    """

    def __init__(
        self,
        hq_root: Union[str, Path] = HQ_ROOT,
        cache: Optional[PackageCache] = None,
        extensions: Optional[List[str]] = None,
    ):
        super().__init__(extensions or RESOLVE_EXTENSIONS)
        self.cache = cache if cache is not None else PackageCache()
        self.hq_root = Path(hq_root)
        self.node = NodeResolver(self.extensions, cache=self.cache)

    @property
    def empty_module(self) -> str:
        return self._normalize(self.hq_root / EMPTY_MODULE)

    @staticmethod
    def is_builtin(mod_name: str) -> bool:
        return mod_name in BUILTIN_MODULES

    def resolve(self, basedir: Union[str, Path], specifier: str) -> str:
        """
        Resolves `specifier` as imported from `basedir`.

        Returns:
            An absolute file path, the empty-module path when the package
            disables the target for browsers, or "<name>/" for a Node built-in
            with no installed package of the same name.

        Raises:
            ModuleResolutionError: no candidate file exists.
        """
        mod_name, _, mod_path = split_specifier(specifier)
        package_filter = partial(self.filter_descriptor, mod_path=mod_path)

        if self.is_builtin(mod_name):
            # Only an installed package directory (e.g. a polyfill) can stand in for a built-in
            try:
                resolution = self.node.resolve(
                    basedir, mod_name, package_filter=package_filter, directory_only=True
                )
            except ModuleResolutionError:
                return f"{mod_name}/"
        else:
            resolution = self.node.resolve(basedir, mod_name, package_filter=package_filter)

        if resolution.disabled:
            logger.debug(f"'{specifier}' is disabled for browsers, serving empty module")
            return self.empty_module
        return resolution.path

    @staticmethod
    def filter_descriptor(pkg: PackageDescriptor, mod_path: str = "") -> Substitution:
        """
        Browser view of a package for one request.

        The entry is `module`, else a string `browser`, else `main`. A browser
        map is consulted with the requested sub-path, or failing that the
        package's `main`, or failing that its `module`.
        """
        main = pkg.module or (pkg.browser if pkg.browser_is_path else None) or pkg.main

        if pkg.browser_is_map:
            key = mod_path or pkg.main or pkg.module
            if key:
                substitution = lookup_browser_map(pkg.browser, key)
                if substitution is not None:
                    return substitution

        return Substitution.default(main)
