from pathlib import Path

import pytest

from conftest import touch, write_json
from hqserver.config import RESOLVE_EXTENSIONS
from hqserver.models import Substitution
from hqserver.resolution.base import ModuleResolutionError
from hqserver.resolution.node import NodeResolver


@pytest.fixture
def mock_node_project(project):
    # Setup:
    # /project
    #   src/
    #     main.js
    #     deep/dir/
    #   node_modules/
    #     plain/      package.json (main: lib/plain.js), lib/plain.js
    #     noentry/    index.js
    #     dialects/   a.js, a.ts, b.ts
    #     nested/     package.json (main: dist) , dist/index.mjs
    touch(project / "src" / "main.js")
    (project / "src" / "deep" / "dir").mkdir(parents=True)

    modules = project / "node_modules"
    write_json(modules / "plain" / "package.json", {"main": "lib/plain.js"})
    touch(modules / "plain" / "lib" / "plain.js")
    touch(modules / "noentry" / "index.js")
    touch(modules / "dialects" / "a.js")
    touch(modules / "dialects" / "a.ts")
    touch(modules / "dialects" / "b.ts")
    write_json(modules / "nested" / "package.json", {"main": "dist"})
    touch(modules / "nested" / "dist" / "index.mjs")
    return project


@pytest.fixture
def resolver():
    return NodeResolver(RESOLVE_EXTENSIONS)


def test_resolve_package_main(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project / "src", "plain")
    assert resolution.path == str((mock_node_project / "node_modules" / "plain" / "lib" / "plain.js").resolve())
    assert not resolution.disabled


def test_resolve_directory_index(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project / "src", "noentry")
    assert resolution.path.endswith("node_modules/noentry/index.js")


def test_resolve_main_pointing_at_directory(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project, "nested")
    assert resolution.path.endswith("nested/dist/index.mjs")


def test_resolve_subpath_with_extension_guessing(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project / "src", "plain/lib/plain")
    assert resolution.path.endswith("plain/lib/plain.js")


def test_extension_order(mock_node_project, resolver):
    assert resolver.resolve(mock_node_project, "dialects/a").path.endswith("dialects/a.js")
    assert resolver.resolve(mock_node_project, "dialects/b").path.endswith("dialects/b.ts")


def test_walks_outward_from_basedir(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project / "src" / "deep" / "dir", "plain")
    assert resolution.path.endswith("node_modules/plain/lib/plain.js")


def test_nearest_node_modules_wins(mock_node_project, resolver):
    write_json(mock_node_project / "src" / "node_modules" / "plain" / "package.json", {"main": "near.js"})
    touch(mock_node_project / "src" / "node_modules" / "plain" / "near.js")
    resolution = resolver.resolve(mock_node_project / "src" / "deep", "plain")
    assert resolution.path.endswith("src/node_modules/plain/near.js")


def test_resolve_relative(mock_node_project, resolver):
    resolution = resolver.resolve(mock_node_project, "./src/main")
    assert resolution.path == str((mock_node_project / "src" / "main.js").resolve())


def test_missing_module_raises(mock_node_project, resolver):
    with pytest.raises(ModuleResolutionError) as excinfo:
        resolver.resolve(mock_node_project / "src", "does-not-exist")
    assert excinfo.value.code == "MODULE_NOT_FOUND"
    assert excinfo.value.specifier == "does-not-exist"


def test_node_modules_paths_skip_vendor_dirs():
    paths = list(NodeResolver.node_modules_paths(Path("/a/node_modules/b")))
    assert paths == [
        Path("/a/node_modules/b/node_modules"),
        Path("/a/node_modules"),
        Path("/node_modules"),
    ]


def test_package_filter_can_redirect(mock_node_project, resolver):
    touch(mock_node_project / "node_modules" / "plain" / "lib" / "web.js")
    resolution = resolver.resolve(
        mock_node_project,
        "plain/lib/plain.js",
        package_filter=lambda pkg: Substitution.rewrite("lib/web.js"),
    )
    assert resolution.path.endswith("plain/lib/web.js")


def test_package_filter_can_disable(mock_node_project, resolver):
    resolution = resolver.resolve(
        mock_node_project,
        "plain",
        package_filter=lambda pkg: Substitution.disabled(),
    )
    assert resolution.disabled
    assert resolution.path is None


def test_descriptors_are_cached(mock_node_project, resolver):
    resolver.resolve(mock_node_project, "plain")
    assert mock_node_project / "node_modules" / "plain" in resolver.cache


@pytest.mark.parametrize("main", [".", "./"])
def test_dot_main_means_index(mock_node_project, resolver, main):
    modules = mock_node_project / "node_modules"
    write_json(modules / "dotted" / "package.json", {"main": main})
    touch(modules / "dotted" / "index.js")
    touch(modules / "dotted.js")
    resolution = resolver.resolve(mock_node_project, "dotted", directory_only=True)
    assert resolution.path == str((modules / "dotted" / "index.js").resolve())


def test_directory_only_skips_file_candidates(mock_node_project, resolver):
    modules = mock_node_project / "node_modules"
    touch(modules / "plain.js")
    assert resolver.resolve(mock_node_project, "plain").path.endswith("node_modules/plain.js")
    resolution = resolver.resolve(mock_node_project, "plain", directory_only=True)
    assert resolution.path.endswith("plain/lib/plain.js")
