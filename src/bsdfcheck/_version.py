from importlib.metadata import PackageNotFoundError, version

try:
    _version = version("bsdfcheck")
except PackageNotFoundError as e:
    raise PackageNotFoundError(
        "bsdfcheck is not installed; please install it in your Python environment."
    ) from e
