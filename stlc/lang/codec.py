"""Tagged record encoding of terms, types and contexts, used to persist generated terms and to read them back.

Every value is encoded as a JSON-compatible record carrying the name of its variant in "tag" and its fields, in
declaration order, in "contents":

```
{"tag": "TyBool"}                                            ; no fields: no contents
{"tag": "TmVar", "contents": "x"}                            ; one field: the field itself
{"tag": "TmFun", "contents": ["x", {"tag": "TyBool"}, ...]}  ; several fields: a list
```

This is the default tagged-object layout of Haskell's aeson, so term datasets exported from Haskell load as-is.
Contexts are lists of [identifier, type] pairs, most recent first.
"""

import json

from stlc.lang.error import GenericException
from stlc.pure.syntax import (Abstraction, Application, BoolType, Conditional, FalseTerm, FunctionType, Term, TrueTerm,
                              Type, UnitTerm, UnitType, Variable)
from stlc.pure.typechecker import Context

# tag: (class, field names in declaration order)
VARIANTS = {
    "TyUnit": (UnitType, ()),
    "TyBool": (BoolType, ()),
    "TyFun": (FunctionType, ("domain", "codomain")),
    "TmUnit": (UnitTerm, ()),
    "TmTrue": (TrueTerm, ()),
    "TmFalse": (FalseTerm, ()),
    "TmVar": (Variable, ("name",)),
    "TmFun": (Abstraction, ("param", "param_type", "body")),
    "TmIf": (Conditional, ("condition", "then_branch", "else_branch")),
    "TmApp": (Application, ("function", "argument")),
}
TAGS = {cls: tag for tag, (cls, __) in VARIANTS.items()}

IDENTIFIER_FIELDS = ("name", "param")
TYPE_FIELDS = ("param_type", "domain", "codomain")


class DecodeError(GenericException):
    """Record that does not encode a term or a type."""

    def __init__(self, msg, record):
        super().__init__(msg, json.dumps(record, ensure_ascii=False), diagnosis=False)


def encode(value):
    """Encodes a term or type as a tagged record."""
    try:
        tag = TAGS[type(value)]
    except KeyError:
        raise TypeError(f"cannot encode {value!r}") from None

    __, names = VARIANTS[tag]
    contents = [_encode_field(getattr(value, name)) for name in names]

    if not contents:
        return {"tag": tag}
    elif len(contents) == 1:
        return {"tag": tag, "contents": contents[0]}
    return {"tag": tag, "contents": contents}


def _encode_field(field):
    if isinstance(field, str):
        return field
    return encode(field)


def decode(record):
    """Decodes a tagged record back into the term or type it encodes. Raises DecodeError on malformed records."""
    if not isinstance(record, dict) or not isinstance(record.get("tag"), str) or record["tag"] not in VARIANTS:
        raise DecodeError("'{}' is not a tagged term or type record", record)

    cls, names = VARIANTS[record["tag"]]

    if not names:
        if "contents" in record:
            raise DecodeError("'{}' should have no contents", record)
        return cls()

    contents = record.get("contents")
    if len(names) == 1:
        contents = [contents]
    if not isinstance(contents, list) or len(contents) != len(names):
        msg = "'{}' should have " + str(len(names)) + " field(s) in contents"
        raise DecodeError(msg, record)

    fields = []
    for name, field in zip(names, contents):
        if name in IDENTIFIER_FIELDS:
            if not isinstance(field, str):
                raise DecodeError("'{}' should have an identifier as " + name, record)
            fields.append(field)
            continue

        value = decode(field)
        expected = Type if name in TYPE_FIELDS else Term
        if not isinstance(value, expected):
            raise DecodeError("'{}' should have a " + expected.__name__.lower() + " as " + name, record)
        fields.append(value)

    return cls(*fields)


def encode_context(context):
    """Encodes a context as a list of [identifier, type record] pairs, most recent first."""
    return [[name, encode(ty)] for name, ty in context]


def decode_context(records):
    """Inverse of encode_context."""
    if not isinstance(records, list):
        raise DecodeError("'{}' is not a list of bindings", records)

    bindings = []
    for record in records:
        if not isinstance(record, list) or len(record) != 2 or not isinstance(record[0], str):
            raise DecodeError("'{}' is not an [identifier, type] binding", record)
        ty = decode(record[1])
        if not isinstance(ty, Type):
            raise DecodeError("'{}' should bind a type", record)
        bindings.append((record[0], ty))
    return Context.of(bindings)


def dumps(value):
    """Encodes a term or type as a line of JSON."""
    return json.dumps(encode(value), ensure_ascii=False)


def loads(text):
    """Decodes a term or type from JSON text."""
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenericException("'{}' is not valid JSON: " + exc.msg, text, start=exc.pos, end=exc.pos + 1) from None
    return decode(record)
