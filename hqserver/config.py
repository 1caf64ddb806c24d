import os
from pathlib import Path
from typing import Dict, List, Set, Tuple
from dotenv import load_dotenv

# Load environment variables from .env file in the working directory
load_dotenv()

# --- Tool Paths ---
# Installation root; ships hq-empty-module.js next to this file
HQ_ROOT = Path(__file__).resolve().parent
LOG_DIR = Path(os.getenv("HQ_LOG_DIR", str(Path.home() / ".hq" / "logs")))

try:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
except OSError:
    # Fallback to local
    LOG_DIR = Path.cwd() / ".hq" / "logs"
    LOG_DIR.mkdir(parents=True, exist_ok=True)

# --- Listener Configuration ---
HOST = os.getenv("HQ_HOST", "localhost")

try:
    PORT = int(os.getenv("HQ_PORT", "8080"))
except ValueError:
    PORT = 8080

MAX_RETRY = 30
CERT_PATTERN = "*.pem"
KEY_SUFFIX = "key.pem"

# --- Project Layout ---
VENDOR_DIR = "node_modules"
VENDOR_ROOT = f"/{VENDOR_DIR}/"
PACKAGE_FILE = "package.json"
CONFIG_FILE = ".hqrc.json"
EMPTY_MODULE = "hq-empty-module.js"
LIVERELOAD_MODULE = "hq-livereload.js"

POLYFILLS: Tuple[str, ...] = (
    "core-js",
    "buffer",
    "base64-js",
    "ieee754",
    "process",
    "regenerator-runtime",
)

# --- Source Dialects ---
SOURCE_EXTENSIONS: Set[str] = {
    ".pug", ".html", ".css", ".scss", ".sass", ".less",
    ".js", ".jsx", ".mjs", ".es6", ".vue", ".svelte",
    ".ts", ".tsx", ".coffee", ".map",
}

# Compiled output extension per dialect; anything missing maps to itself
RESULT_TYPES: Dict[str, str] = {
    ".jsx": ".js",
    ".ts": ".js",
    ".tsx": ".js",
    ".es6": ".js",
    ".vue": ".js",
    ".svelte": ".js",
    ".coffee": ".js",
    ".scss": ".css",
    ".sass": ".css",
    ".less": ".css",
    ".pug": ".html",
}

# Order matters: first existing file wins
PROBE_EXTENSIONS: List[str] = [
    ".jsx", ".vue", ".svelte", ".mjs", ".json",
    ".ts", ".tsx", ".coffee", ".es6", ".js",
]

RESOLVE_EXTENSIONS: List[str] = [
    ".js", ".jsx", ".mjs", ".es6", ".vue", ".svelte",
    ".ts", ".tsx", ".coffee",
    ".css", ".scss", ".sass", ".less",
    ".pug", ".html",
]

# Node.js core modules; resolved as namespaces rather than files
BUILTIN_MODULES: Set[str] = {
    "assert", "assert/strict", "async_hooks", "buffer", "child_process",
    "cluster", "console", "constants", "crypto", "dgram", "diagnostics_channel",
    "dns", "dns/promises", "domain", "events", "fs", "fs/promises", "http",
    "http2", "https", "inspector", "module", "net", "os", "path", "path/posix",
    "path/win32", "perf_hooks", "process", "punycode", "querystring",
    "readline", "readline/promises", "repl", "stream", "stream/consumers",
    "stream/promises", "stream/web", "string_decoder", "sys", "timers",
    "timers/promises", "tls", "trace_events", "tty", "url", "util",
    "util/types", "v8", "vm", "wasi", "worker_threads", "zlib",
}
