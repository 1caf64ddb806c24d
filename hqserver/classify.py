"""
Predicates over request paths.

Paths are URL-style: forward slashes, rooted at the project root
(e.g. "/node_modules/vue/dist/vue.esm.js"). Nothing here touches the disk.
"""
import re
from posixpath import basename, splitext
from typing import Iterable

from .config import (
    EMPTY_MODULE,
    LIVERELOAD_MODULE,
    POLYFILLS,
    RESULT_TYPES,
    SOURCE_EXTENSIONS,
    VENDOR_ROOT,
)

WORKER_RE = re.compile(r"\b(worker|sw)\d*\b", re.IGNORECASE)


def _matches_module(path: str, module: str) -> bool:
    package_dir = f"{VENDOR_ROOT}{module}"
    return path == package_dir or path.startswith(f"{package_dir}/")


def is_vendor(path: str) -> bool:
    return path.startswith(VENDOR_ROOT)


def is_polyfill(path: str) -> bool:
    return any(_matches_module(path, module) for module in POLYFILLS)


def is_test(path: str) -> bool:
    return path.startswith("/test/")


def is_worker(path: str) -> bool:
    return WORKER_RE.search(basename(path)) is not None


def is_map(path: str) -> bool:
    return splitext(path)[1].lower() == ".map"


def is_default_favicon(path: str) -> bool:
    return path.endswith("favicon.ico")


def is_angular_compiler(path: str) -> bool:
    return path.endswith("compiler/fesm5/compiler.js")


def is_internal(path: str) -> bool:
    return f"/{LIVERELOAD_MODULE}" in path or f"/{EMPTY_MODULE}" in path


def is_certificate(path: str, certs: Iterable[str]) -> bool:
    """True if `path` is one of the certificate files found at startup."""
    return path in certs


def is_source(ext: str) -> bool:
    return ext in SOURCE_EXTENSIONS


def get_res_type(ext: str) -> str:
    """Extension a source dialect compiles to (.scss -> .css); identity otherwise."""
    return RESULT_TYPES.get(ext, ext)
