from socket import socket as Socket
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

BrowserMap = Dict[str, Union[str, bool]]


class PackageDescriptor(BaseModel):
    """The subset of package.json fields the resolver cares about."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    main: Optional[str] = None
    module: Optional[str] = None
    browser: Optional[Union[str, BrowserMap]] = Field(
        None, description="Whole-package replacement path, or per-file substitution map"
    )
    version: Optional[str] = None

    @classmethod
    def from_package_json(cls, data: Any) -> "PackageDescriptor":
        """
        Extracts the recognized fields one by one.

        A field of the wrong type is dropped on its own, as are browser map
        entries that are neither a path nor a boolean.
        """
        if not isinstance(data, dict):
            return cls()

        fields = {
            name: data[name]
            for name in ("main", "module", "version")
            if isinstance(data.get(name), str)
        }

        browser = data.get("browser")
        if isinstance(browser, str):
            fields["browser"] = browser
        elif isinstance(browser, dict):
            fields["browser"] = {
                key: value for key, value in browser.items()
                if isinstance(key, str) and isinstance(value, (str, bool))
            }

        return cls(**fields)

    @property
    def browser_is_path(self) -> bool:
        return isinstance(self.browser, str)

    @property
    def browser_is_map(self) -> bool:
        return isinstance(self.browser, dict)


class Version(BaseModel):
    major: int
    minor: int = 0
    patch: int = 0


class SubstitutionKind(str, Enum):
    DEFAULT = "default"      # no browser entry applies
    CONTINUE = "continue"    # every file in the package maps to `main`
    DISABLED = "disabled"    # module replaced by the empty stand-in


class Substitution(BaseModel):
    """
    Outcome of filtering a package descriptor for one request.

    For DEFAULT, `main` is the package's effective entry (used only when the
    package directory itself is loaded). For CONTINUE, `main` replaces any
    file the walk would otherwise pick inside the package.
    """
    kind: SubstitutionKind = SubstitutionKind.DEFAULT
    main: Optional[str] = None

    @classmethod
    def default(cls, main: Optional[str] = None) -> "Substitution":
        return cls(main=main)

    @classmethod
    def rewrite(cls, main: str) -> "Substitution":
        return cls(kind=SubstitutionKind.CONTINUE, main=main)

    @classmethod
    def disabled(cls) -> "Substitution":
        return cls(kind=SubstitutionKind.DISABLED)


class Listener(BaseModel):
    """A bound listening socket plus what operators need to reach it."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    socket: Socket
    host: str
    port: int
    secure: bool = False
    certfile: Optional[Path] = None
    keyfile: Optional[Path] = None
    local_ip: Optional[str] = None
    certs: List[str] = Field(default_factory=list, description="Certificate paths relative to the project root")

    @property
    def protocol(self) -> str:
        return "https" if self.secure else "http"

    @property
    def url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    @property
    def network_url(self) -> Optional[str]:
        if not self.local_ip:
            return None
        return f"{self.protocol}://{self.local_ip}:{self.port}"


class Resolution(BaseModel):
    """Result of one walk: a file, or a module disabled by browser substitution."""
    path: Optional[str] = None
    disabled: bool = False
