from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union


@dataclass(frozen=True)
class TranspileOptions:
    in_file: Path
    out_file: Optional[Path] = None
    transpiler: Union[str, Callable, None] = None
    backend_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "in_file", Path(self.in_file))
        if self.out_file is not None:
            object.__setattr__(self, "out_file", Path(self.out_file))
        object.__setattr__(
            self, "backend_options", MappingProxyType(dict(self.backend_options))
        )

    def resolve_out_file(self) -> Path:
        """Artifact path: explicit ``out_file``, else the source with a
        ``.py`` suffix. A ``.py`` source gets ``<stem>.out.py`` so it is
        never overwritten."""
        if self.out_file is not None:
            return self.out_file

        out_file = self.in_file.with_suffix(".py")
        if out_file == self.in_file:
            out_file = self.in_file.with_name(f"{self.in_file.stem}.out.py")

        return out_file


@dataclass(frozen=True)
class TranspileResult:
    in_file: Path
    out_file: Path
    backend: str
