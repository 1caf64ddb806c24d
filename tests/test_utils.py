import os
import pytest
from pathlib import Path

from hqserver.models import Version
from hqserver.utils import (
    get_local_ip,
    get_module_path,
    get_version,
    normalize_path,
    path_to_url,
    url_to_path,
)


def test_normalize_path_basic():
    normalized = normalize_path("hqserver/server.py")
    assert normalized.endswith("hqserver/server.py")
    assert "\\" not in normalized
    assert Path(normalized).is_absolute()


def test_normalize_path_empty():
    assert normalize_path("") == ""
    assert normalize_path(None) == ""


def test_path_to_url():
    assert path_to_url("/srv/app/src/index.js") == "/srv/app/src/index.js"
    assert path_to_url("/srv/my app/a#b.js") == "/srv/my%20app/a%23b.js"


def test_url_to_path_posix():
    if os.sep != "/":
        pytest.skip("POSIX-specific test")
    assert url_to_path("/src/index.js") == "/src/index.js"


def test_get_module_path():
    assert get_module_path("/app/node_modules/vue/dist/vue.js") == "/node_modules/vue/dist/vue.js"
    assert get_module_path("/app/node_modules/a/node_modules/b/index.js") == "/node_modules/b/index.js"


def test_get_version():
    deps = {"vue": "^2.6.10", "react": "~16.8", "local": "file:../local"}
    assert get_version(deps, "vue") == Version(major=2, minor=6, patch=10)
    assert get_version(deps, "react") == Version(major=16, minor=8, patch=0)
    assert get_version(deps, "local") is None
    assert get_version(deps, "svelte") is None
    assert get_version(None, "vue") is None


def test_get_local_ip_handles_no_network(mocker):
    sock = mocker.patch("hqserver.utils.socket.socket").return_value
    sock.connect.side_effect = OSError("Network is unreachable")
    assert get_local_ip() is None
    sock.close.assert_called_once()


def test_get_local_ip_skips_loopback(mocker):
    sock = mocker.patch("hqserver.utils.socket.socket").return_value
    sock.getsockname.return_value = ("127.0.0.1", 5000)
    assert get_local_ip() is None
    sock.getsockname.return_value = ("192.168.0.7", 5000)
    assert get_local_ip() == "192.168.0.7"
