"""*attrs*-based utility classes and functions."""

from __future__ import annotations

import enum
import re
from textwrap import dedent, indent

import attrs


class MetadataKey(enum.Enum):
    """
    Attribute metadata keys.

    These Enum values should be used as metadata attribute keys.
    """

    DOC = "doc"  #: Documentation for this field (str)
    TYPE = "type"  #: Documented type for this field (str)
    INIT_TYPE = "init_type"  #: Documented constructor parameter for this field (str)
    DEFAULT = "default"  #: Documented default value for this field (str)


@attrs.define
class _FieldDoc:
    """Internal convenience class to store field documentation information."""

    doc = attrs.field(default=None)
    type = attrs.field(default=None)
    init_type = attrs.field(default=None)
    default = attrs.field(default=None)


def _numpy_formatter(cls_doc: str | None, field_docs: dict[str, _FieldDoc]) -> str:
    """
    Append "Parameters" and "Fields" sections to a class docstring.

    Parameters
    ----------
    cls_doc : str
        Class docstring to extend.

    field_docs : dict[str, _FieldDoc]
        Attributes documentation content.

    Returns
    -------
    str
        Updated class docstring.
    """
    if not field_docs:
        return cls_doc

    param_docstrings = []
    attr_docstrings = []

    for field_name, field_doc in field_docs.items():
        name = field_name.lstrip("_")
        init_type_doc = (
            f" : {field_doc.init_type}" if field_doc.init_type is not None else ""
        )
        default_doc = (
            f", default: {field_doc.default}" if field_doc.default is not None else ""
        )
        param_docstrings.append(
            f"{name}{init_type_doc}{default_doc}\n{indent(field_doc.doc, '    ')}\n"
        )

        if not field_name.startswith("_"):
            brief = re.split(r"\. |\.\n", field_doc.doc)[0].strip()
            if not brief.endswith("."):
                brief += "."
            type_doc = field_doc.type if field_doc.type is not None else ""
            attr_docstrings.append(f"{name} : {type_doc}\n{indent(brief, '    ')}\n")

    cls_doc = dedent((cls_doc or "").lstrip("\n")).rstrip()
    sections = [cls_doc, "", "Parameters", "----------", *param_docstrings]
    if attr_docstrings:
        sections.extend(["Fields", "------", *attr_docstrings])

    return "\n".join(sections)


def parse_docs(cls: type) -> type:
    """
    Extract attribute documentation and update class docstring with it.

    This decorator will examine each *attrs* attribute and check its metadata
    for documentation content. It will then update the class's docstring
    based on this content.

    Notes
    -----
    * Meant to be used as a class decorator.
    * Must be applied **after** :func:`attrs.define` (or any other
      attrs decorator).
    * Fields must be documented using :func:`documented`.
    """
    docs = {}
    for field in cls.__attrs_attrs__:
        if MetadataKey.DOC not in field.metadata:
            continue

        field_doc = _FieldDoc(doc=field.metadata[MetadataKey.DOC])
        field_doc.type = field.metadata.get(MetadataKey.TYPE, str(field.type))
        field_doc.init_type = field.metadata.get(MetadataKey.INIT_TYPE, field_doc.type)
        field_doc.default = field.metadata.get(MetadataKey.DEFAULT)
        docs[field.name] = field_doc

    cls.__doc__ = _numpy_formatter(cls.__doc__, docs)
    return cls


def documented(
    attrib: attrs.Attribute,
    doc: str | None = None,
    type: str | None = None,
    init_type: str | None = None,
    default: str | None = None,
) -> attrs.Attribute:
    """
    Declare an attrs field as documented.

    Parameters
    ----------
    attrib : attrs.Attribute
        *attrs* attribute definition to which documentation is to be attached.

    doc : str, optional
        Docstring for the considered field. If set to ``None``, this function
        does nothing.

    type : str, optional
        Documented type for the considered field.

    init_type : str, optional
        Documented constructor parameter for the considered field.

    default : str, optional
        Documented default value for the considered field.

    Returns
    -------
    attrs.Attribute
        ``attrib``, with metadata updated with documentation contents.
    """
    if doc is not None:
        attrib.metadata[MetadataKey.DOC] = doc

    if type is not None:
        attrib.metadata[MetadataKey.TYPE] = type

    if init_type is not None:
        attrib.metadata[MetadataKey.INIT_TYPE] = init_type

    if default is not None:
        attrib.metadata[MetadataKey.DEFAULT] = default

    return attrib


def define(maybe_cls=None, **kwargs):
    """
    A wrapper around :func:`attrs.define` that automatically applies docstring
    processing with :func:`.parse_docs`. All arguments are forwarded to
    :func:`attrs.define`.
    """

    def wrap(cls):
        return parse_docs(attrs.define(maybe_cls=cls, **kwargs))

    return wrap if maybe_cls is None else wrap(maybe_cls)


def frozen(maybe_cls=None, **kwargs):
    """
    A wrapper around :func:`attrs.frozen` that automatically applies docstring
    processing with :func:`.parse_docs`. All arguments are forwarded to
    :func:`attrs.frozen`.
    """

    def wrap(cls):
        return parse_docs(attrs.frozen(maybe_cls=cls, **kwargs))

    return wrap if maybe_cls is None else wrap(maybe_cls)
