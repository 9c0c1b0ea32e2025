from __future__ import annotations

import math
import os
from pathlib import Path

from dynaconf import Dynaconf, Validator

from . import _defaults


def _cast_path(value) -> list[Path]:
    # Environment variables hold an OS path list; settings files hold a list
    if value is None:
        return []

    if isinstance(value, (str, os.PathLike)):
        value = [x for x in str(value).split(os.pathsep) if x]

    return [Path(x) for x in value]


def _validate_negligible_value(value: float) -> bool:
    return math.isfinite(value) and value >= 0.0


#: Main settings data structure. See the `Dynaconf documentation <https://www.dynaconf.com/>`__
#: for details.
settings = Dynaconf(
    settings_files=["bsdfcheck.toml", "bsdfcheck.yml", "bsdfcheck.yaml"],
    envvar_prefix="BSDFCHECK",
    merge_enabled=True,
    validate_on_update=True,
    validators=[
        Validator(
            "EXTRACT_DIFFUSE",
            cast=bool,
            default=_defaults.extract_diffuse,
        ),
        Validator(
            "NEGLIGIBLE_VALUE",
            cast=float,
            condition=_validate_negligible_value,
            default=_defaults.negligible_value,
        ),
        Validator(
            "PATH",
            cast=_cast_path,
            default=_defaults.path,
        ),
        Validator(
            "SEPARATOR",
            cast=str,
            default=_defaults.separator,
        ),
    ],
)
