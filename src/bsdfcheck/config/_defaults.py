"""
This module provides defaults settings for bsdfcheck. Dynaconf's double
underscore convention is used to represent parameter dotted hierarchical naming.
"""

from __future__ import annotations


def extract_diffuse(settings=None, validator=None) -> bool:
    return False


def negligible_value(settings=None, validator=None) -> float:
    # Forward BSDF values at or below this are not tested for reciprocity
    return 1e-6


def path(settings=None, validator=None) -> list:
    return []


def separator(settings=None, validator=None) -> str:
    return "=" * 53
