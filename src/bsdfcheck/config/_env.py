from __future__ import annotations

import os

#: Identifier of the environment in which bsdfcheck is used. Takes the value of
#: the ``BSDFCHECK_ENV`` environment variable if it is set; otherwise defaults
#: to ``"default"``.
ENV: str = os.environ.get("BSDFCHECK_ENV", "default")
