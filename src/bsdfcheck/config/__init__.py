"""Package-wide settings, loaded from configuration files and environment."""

from ._env import ENV
from ._settings import settings

__all__ = ["ENV", "settings"]
