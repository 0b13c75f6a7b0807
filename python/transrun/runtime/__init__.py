from .loader import ArtifactLoader, load_artifact
from .meta_finder import SourceFinder, install_hook, uninstall_hook

__all__ = [
    "ArtifactLoader",
    "load_artifact",
    "SourceFinder",
    "install_hook",
    "uninstall_hook",
]
