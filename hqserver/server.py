import os
import sys
import socket
import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Tuple, Union

from hypercorn.asyncio import serve as hyper_serve
from hypercorn.config import Config as HyperConfig

from .config import CERT_PATTERN, HOST, KEY_SUFFIX, LOG_DIR, MAX_RETRY, PORT, VENDOR_DIR
from .models import Listener
from .utils import get_local_ip

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(LOG_DIR / "server.log", encoding='utf-8'),
            logging.StreamHandler(sys.stderr)
        ]
    )


def find_certificates(root: Path) -> List[Path]:
    """*.pem files under the project root, skipping node_modules."""
    certs = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d != VENDOR_DIR)
        for f in sorted(filenames):
            path = Path(dirpath) / f
            if path.match(CERT_PATTERN):
                certs.append(path)
    return certs


def split_tls_material(certs: List[Path]) -> Tuple[Optional[Path], Optional[Path]]:
    """(certificate, key) among the first two candidates; a '*key.pem' name marks the key."""
    cert = key = None
    for path in certs[:2]:
        if path.name.endswith(KEY_SUFFIX):
            key = path
        else:
            cert = path
    return cert, key


def bind_free_socket(host: str, port: int, max_retry: int = MAX_RETRY) -> Tuple[socket.socket, int]:
    """
    Binds a listening TCP socket on `host`, starting at `port`.

    A port in use is retried on the next one until `max_retry` retries have
    been spent; the last bind error is then raised.
    """
    attempt = 0
    while True:
        family, _, _, _, address = socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE
        )[0]
        sock = socket.socket(family, socket.SOCK_STREAM)
        if os.name != "nt":
            # Lets a restarted server reclaim a port left in TIME_WAIT
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind(address)
            sock.listen(socket.SOMAXCONN)
            return sock, port
        except OSError as e:
            sock.close()
            if attempt > max_retry:
                logger.error(f"No free port found after {attempt} retries: {e}")
                raise
            logger.warning(f"Port {port} unavailable ({e}), trying {port + 1}")
            attempt += 1
            port += 1


def get_server(root: Union[str, Path], host: str = HOST, port: int = PORT) -> Listener:
    """
    Binds the dev server listener for a project.

    TLS is enabled when the project holds both a certificate and a key
    (*.pem); the transport then speaks HTTP/2 with HTTP/1.1 fallback.
    """
    root = Path(root).resolve()
    certs = find_certificates(root)
    certfile, keyfile = split_tls_material(certs)
    secure = bool(certfile and keyfile)

    sock, bound_port = bind_free_socket(host, port)
    listener = Listener(
        socket=sock,
        host=host,
        port=bound_port,
        secure=secure,
        certfile=certfile if secure else None,
        keyfile=keyfile if secure else None,
        local_ip=get_local_ip(),
        certs=["/" + cert.relative_to(root).as_posix() for cert in certs],
    )

    logger.info(f"Visit {listener.url}")
    if listener.network_url:
        logger.info(f"or {listener.network_url} within local network")
    return listener


def hypercorn_config(listener: Listener) -> HyperConfig:
    config = HyperConfig()
    # Hypercorn owns (and closes) its copy of the descriptor
    config.bind = [f"fd://{os.dup(listener.socket.fileno())}"]
    config.accesslog = None
    if listener.secure:
        config.certfile = str(listener.certfile)
        config.keyfile = str(listener.keyfile)
        config.alpn_protocols = ["h2", "http/1.1"]
    return config


async def serve(
    app: Callable[..., Awaitable[Any]],
    listener: Listener,
    shutdown_trigger: Optional[Callable[..., Awaitable[Any]]] = None,
):
    """Serves an ASGI app on a bound listener until `shutdown_trigger` completes."""
    try:
        await hyper_serve(app, hypercorn_config(listener), shutdown_trigger=shutdown_trigger)
    finally:
        listener.socket.close()


def run(app: Callable[..., Awaitable[Any]], root: Union[str, Path], host: str = HOST, port: int = PORT):
    configure_logging()
    listener = get_server(root, host, port)
    asyncio.run(serve(app, listener))
