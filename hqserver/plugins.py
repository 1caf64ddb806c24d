import re
import json
import logging
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any, List, Optional, Union

from .config import CONFIG_FILE, VENDOR_ROOT
from .resolution.browser import BrowserResolver

logger = logging.getLogger(__name__)


def _load_module(name: str, path: str) -> ModuleType:
    module_name = "hq_plugin_" + re.sub(r"\W", "_", name)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load plugin '{name}' from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def read_plugins(
    root: Union[str, Path],
    resolver: BrowserResolver,
    config_path: Optional[Union[str, Path]] = None,
) -> List[Any]:
    """
    Instantiates the plugins listed in the project config.

    The config holds a "plugins" list whose entries are a package name or
    [name, *args]. Each package is resolved from the project's node_modules
    and its `default` callable is invoked with the declared args.

    Plugins are optional: any failure yields an empty list.
    """
    config_path = Path(config_path) if config_path else Path(root) / CONFIG_FILE
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            plugins = json.load(f)["plugins"]

        declared = []
        for entry in plugins:
            name, *args = entry if isinstance(entry, list) else [entry]
            path = resolver.resolve(root, f"{VENDOR_ROOT}{name}")
            declared.append((_load_module(name, path).default, args))

        instances = [plugin(*args) for plugin, args in declared]
    except Exception as e:
        logger.warning(f"No plugins loaded from {config_path}: {e}")
        return []

    logger.info(f"Loaded {len(instances)} plugin(s) from {config_path}")
    return instances
