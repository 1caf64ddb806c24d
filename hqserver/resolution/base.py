import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union


class ModuleResolutionError(LookupError):
    """No file satisfies a specifier under any probed location or extension."""

    code = "MODULE_NOT_FOUND"

    def __init__(self, specifier: str, basedir: Union[str, Path]):
        self.specifier = specifier
        self.basedir = str(basedir)
        super().__init__(f"Cannot find module '{specifier}' from '{self.basedir}'")


class ModuleResolver(ABC):
    """
    Abstract base class for module resolution strategies.
    Responsible for mapping import specifiers (e.g. 'vue', 'lodash/fp/map')
    to physical file paths on disk.
    """

    def __init__(self, extensions: Iterable[str]):
        self.extensions = list(extensions)

    @abstractmethod
    def resolve(self, basedir: Union[str, Path], specifier: str, *args, **kwargs):
        """
        Resolves a specifier as imported from a file in `basedir`.

        Raises:
            ModuleResolutionError: nothing on disk satisfies the specifier.
        """
        pass

    def _probe(self, base: Path) -> Optional[Path]:
        """Returns the first existing file among `base` and `base` + each extension."""
        for ext in ("", *self.extensions):
            candidate = Path(f"{base}{ext}")
            if candidate.is_file():
                return candidate
        return None

    @staticmethod
    def _is_relative(specifier: str) -> bool:
        return specifier.startswith(("./", "../", "/")) or specifier in (".", "..")

    @staticmethod
    def _normalize(path: Path) -> str:
        return os.path.normpath(os.path.abspath(path))
