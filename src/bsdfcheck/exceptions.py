"""Exceptions and warnings specific to bsdfcheck."""

# ------------------------------------------------------------------------------
#                                   Exceptions
# ------------------------------------------------------------------------------


class BSDFCheckError(Exception):
    """Base class for all errors that stop a bsdfcheck run."""

    pass


class UsageError(BSDFCheckError):
    """Raised when the command line does not name any input file."""

    def __init__(self, prog="bsdfcheck"):
        super().__init__(prog)
        self.prog = prog

    def __str__(self):
        return f"Usage: {self.prog} bsdf.xml .."


class PathResolutionError(BSDFCheckError, FileNotFoundError):
    """Raised when an input file cannot be found on the search path."""

    def __init__(self, filename, paths=None):
        super().__init__(str(filename))
        self.filename = str(filename)
        self.paths = list(paths) if paths is not None else []

    def __str__(self):
        return f"Cannot find file '{self.filename}'"


class LoadError(BSDFCheckError):
    """
    Raised when a BSDF file is found but its contents cannot be turned into
    an in-memory dataset (malformed or unsupported format).
    """

    def __init__(self, filename, reason):
        super().__init__(f"{filename}: {reason}")
        self.filename = str(filename)
        self.reason = reason

    def __str__(self):
        return f"Error loading '{self.filename}': {self.reason}"


class EvaluationError(BSDFCheckError):
    """Raised when a loaded BSDF cannot be evaluated for a direction pair."""

    pass


# ------------------------------------------------------------------------------
#                                   Warnings
# ------------------------------------------------------------------------------


class ConfigWarning(UserWarning):
    """Used when encountering nonfatal configuration issues."""

    pass
