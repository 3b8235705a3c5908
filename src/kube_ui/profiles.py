"""
Cluster profiles read from the kube-ui profile file.

The file is JSON with a single "configs" list; each entry names a
kubeconfig path plus optional defaults (namespace, tunnel image, image
pull secret). It is loaded once per session and turned into a direct
mapping from kubeconfig path to tunnel settings.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import PROFILE_ENV_VAR, PROFILE_FILE_NAME
from .exceptions import ProfileError
from .tunnel import TunnelImageConfig


class Profile(BaseModel):
    """One named cluster profile."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    namespace: str = ""
    comment: str = ""
    image_pull_secret: Optional[str] = Field(default=None, alias="imagePullSecret")
    tunnel_image: Optional[str] = Field(default=None, alias="tunnelImage")

    @property
    def display_name(self) -> str:
        """Name shown in the profile menu, with the comment in parentheses."""
        if self.comment:
            return f"{self.name} ({self.comment})"
        return self.name

    def tunnel_settings(self) -> TunnelImageConfig:
        """Tunnel image and pull secret, falling back to defaults when unset."""
        if self.tunnel_image:
            return TunnelImageConfig(
                image=self.tunnel_image,
                image_pull_secret=self.image_pull_secret or None,
            )
        return TunnelImageConfig(image_pull_secret=self.image_pull_secret or None)


class ProfileFile(BaseModel):
    """Top-level structure of the profile file."""

    configs: list[Profile] = Field(default_factory=list)

    def tunnel_settings_by_path(self) -> dict[str, TunnelImageConfig]:
        """
        Map each profile's expanded kubeconfig path to its tunnel settings.

        When two profiles share a path the first one wins.
        """
        settings: dict[str, TunnelImageConfig] = {}
        for profile in self.configs:
            settings.setdefault(expand_path(profile.path), profile.tunnel_settings())
        return settings


def expand_path(path: str) -> str:
    """Expand ~ so profile paths and --kubeconfig values compare equal."""
    return str(Path(path).expanduser())


def default_profile_path() -> Path:
    """Profile file location: $KUBE_UI_CONFIG, else ~/.kube-ui."""
    override = os.environ.get(PROFILE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / PROFILE_FILE_NAME


def load_profiles(path: Optional[Path] = None) -> ProfileFile:
    """
    Load the profile file.

    Args:
        path: File to read; defaults to default_profile_path().

    Returns:
        Parsed profiles; empty when the file does not exist.

    Raises:
        ProfileError: The file exists but is unreadable, not JSON, or does
            not match the expected structure.
    """
    path = path or default_profile_path()
    if not path.exists():
        return ProfileFile()
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        raise ProfileError(f"error reading {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ProfileError(f"error parsing {path}: {e}") from e
    try:
        return ProfileFile.model_validate(data)
    except ValidationError as e:
        raise ProfileError(f"invalid profile file {path}: {e}") from e
