"""Type aliases shared across bsdfcheck."""

import os
import typing as t

import numpy as np

#: File names accepted by the resolver and the loader.
PathLike = t.Union[str, os.PathLike]

#: Direction 3-vectors, not necessarily normalized.
DirectionLike = t.Union[np.ndarray, t.Sequence[float]]
