"""Helmholtz reciprocity checks for BSDF data."""

from ._version import _version

__version__ = _version  #: bsdfcheck version string.
