from __future__ import annotations

import logging
import warnings
from pathlib import Path

import attrs

from .attrs import define
from .config import settings
from .exceptions import ConfigWarning, PathResolutionError
from .typing import PathLike

logger = logging.getLogger(__name__)


def _validator_dir_exists(instance, attribute, value):
    if not value.is_dir():
        raise NotADirectoryError(value)


@define
class FileResolver:
    """
    This class resolves paths relative to a list of locations on disk.
    Locations are looked up in order upon calling the :meth:`.resolve` method.
    If a lookup is successful, the resolved absolute path is returned;
    otherwise, the input path is returned unchanged (or, in strict mode, a
    :class:`.PathResolutionError` is raised).

    Parameters
    ----------
    paths : list of path-likes, optional
        A list of search directories. Each entry must exist.

    Examples
    --------
    A single instance of the file resolver is available as
    :data:`bsdfcheck.resolver.fresolver`:

    >>> from bsdfcheck.resolver import fresolver

    To add a path in front of the search list, use the
    :meth:`~.FileResolver.prepend` method, *e.g.*:

    >>> fresolver.prepend("some/path/on/the/drive")

    To resolve a relative path, use the :meth:`~.FileResolver.resolve` method:

    >>> fresolver.resolve("blinds.xml", strict=True)
    """

    paths: list[Path] = attrs.field(
        factory=list,
        converter=lambda value: [Path(x).resolve() for x in value],
        validator=attrs.validators.deep_iterable(_validator_dir_exists),
    )

    def prepend(self, path: PathLike, avoid_duplicates: bool = True) -> None:
        """
        Prepend an entry at the beginning of the list of search paths.

        Parameters
        ----------
        path : path-like
            Path to prepend. The location must exist on disk.

        avoid_duplicates : bool, optional
            If ``True``, do not prepend again a path that is already registered.
        """
        path = Path(path).resolve()
        if not path.is_dir():
            raise NotADirectoryError(f"{path}")

        if avoid_duplicates and path in self.paths:
            return

        self.paths.insert(0, path)

    def resolve(self, path: PathLike, strict: bool = False, cwd: bool = True) -> Path:
        """
        Resolve a path: search all registered locations in order. If no file is
        found in any of the registered location, ``path`` is returned unchanged.

        Parameters
        ----------
        path : path-like
            Path to be resolved.

        strict : bool, default: False
            If ``True``, resolution failure will raise.

        cwd : bool, default: True
            If ``True``, check first if a file relative to the current working
            directory exists.

        Returns
        -------
        Path
            Resolved path

        Raises
        ------
        PathResolutionError
            If ``strict`` is ``True`` and ``path`` was not found.
        """
        path = Path(path)

        if path.is_absolute():
            if path.is_file() or not strict:
                return path
        else:
            for base in self.paths if not cwd else [Path.cwd()] + self.paths:
                combined = base / path
                if combined.is_file():
                    logger.debug("Resolved '%s' to '%s'", path, combined)
                    return combined

        if strict:
            raise PathResolutionError(path, self.paths)

        return path


def _make_fresolver() -> FileResolver:
    paths = []
    for path in settings["path"]:
        if Path(path).is_dir():
            paths.append(path)
        else:
            warnings.warn(
                f"Search path entry '{path}' is not a directory and is ignored",
                ConfigWarning,
            )

    return FileResolver(paths)


#: Unique file resolver instance, initialized with the ``PATH`` setting.
fresolver = _make_fresolver()
