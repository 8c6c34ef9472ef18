"""Discovery and loading of layout.yaml manifests."""
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from layout.core.errors import ManifestError
from layout.models.manifest import Manifest

MANIFEST_FILE = "layout.yaml"
CONTENT_DIR = "content"


def load_manifest(path: Union[str, Path]) -> Manifest:
    """Load and validate a manifest file.

    Args:
        path: Path to layout.yaml

    Returns:
        Parsed manifest

    Raises:
        ManifestError: If the file cannot be read or is not a valid manifest
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ManifestError(f"read manifest {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ManifestError(f"parse manifest {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(f"manifest {path} must be a mapping")

    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(f"invalid manifest {path}: {exc}") from exc


class ManifestLoader:
    """Finds manifests below a layout source directory."""

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir)
        self._cache: Dict[Path, Manifest] = {}

    def find_manifests(self) -> List[Path]:
        """List manifest files below the root, top-down.

        A directory holding a manifest is not scanned any deeper.
        """
        found: List[Path] = []
        for dirpath, dirnames, _ in os.walk(self.root_dir):
            dirnames.sort()
            candidate = Path(dirpath) / MANIFEST_FILE
            if candidate.is_file():
                found.append(candidate)
                dirnames[:] = []
        return found

    def load(self, path: Path) -> Manifest:
        if path not in self._cache:
            self._cache[path] = load_manifest(path)
        return self._cache[path]

    def titles(self, manifests: List[Path]) -> List[str]:
        """Display titles for ``manifests``; untitled ones use their directory name."""
        return [
            self.load(path).display_title(self._relative_name(path))
            for path in manifests
        ]

    def _relative_name(self, path: Path) -> Optional[str]:
        try:
            rel = path.parent.relative_to(self.root_dir)
        except ValueError:
            return path.parent.name
        return str(rel) if str(rel) != "." else path.parent.name
