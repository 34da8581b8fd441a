"""
Selector query language.

WHAT: Parses and evaluates rich queries of the form
``{"selector": {...}}`` against stored JSON documents.

WHY: Owner lookups and ad-hoc queries match on record fields rather than
keys. Both state store implementations share this evaluator so an in-memory
store and the SQL store answer the same query identically.

HOW: A subset of the CouchDB Mango syntax:
- ``{"field": value}`` is an implicit ``$eq``
- ``{"field": {"$op": operand, ...}}`` with ``$eq``, ``$ne``, ``$gt``,
  ``$gte``, ``$lt``, ``$lte``, ``$in``, ``$nin``, ``$exists``
- ``{"$and": [...]}`` and ``{"$or": [...]}`` combine sub-selectors
- Dotted field names descend into nested objects

Documents that are not JSON objects never match.
"""

import json
from typing import Any, Callable, Dict, Optional

from certledger.store.errors import QueryError


_MISSING = object()


def _ordered(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(value: Any, operand: Any) -> bool:
        if value is _MISSING:
            return False
        try:
            return op(value, operand)
        except TypeError:
            # Mixed types never match, same as the document store
            return False

    return compare


def _operand_list(name: str, operand: Any) -> list:
    if not isinstance(operand, list):
        raise QueryError(f"operator {name} requires an array operand")
    return operand


OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": lambda value, operand: value is not _MISSING and value == operand,
    "$ne": lambda value, operand: value is not _MISSING and value != operand,
    "$gt": _ordered(lambda value, operand: value > operand),
    "$gte": _ordered(lambda value, operand: value >= operand),
    "$lt": _ordered(lambda value, operand: value < operand),
    "$lte": _ordered(lambda value, operand: value <= operand),
    "$in": lambda value, operand: value is not _MISSING and value in _operand_list("$in", operand),
    "$nin": lambda value, operand: value is not _MISSING and value not in _operand_list("$nin", operand),
    "$exists": lambda value, operand: (value is not _MISSING) == bool(operand),
}


def parse_query(query_string: str) -> Dict[str, Any]:
    """
    Parse a query string and return its selector.

    Args:
        query_string: JSON text, e.g. ``{"selector":{"owner":"bob"}}``

    Returns:
        The selector object

    Raises:
        QueryError: If the text is not JSON, has no selector, or uses an
            unknown operator
    """
    try:
        query = json.loads(query_string)
    except (TypeError, ValueError) as e:
        raise QueryError(f"invalid query string: {e}") from e

    if not isinstance(query, dict) or not isinstance(query.get("selector"), dict):
        raise QueryError("query must be a JSON object with a 'selector' object")

    selector = query["selector"]
    _validate(selector)
    return selector


def _validate(selector: Dict[str, Any]) -> None:
    for field, condition in selector.items():
        if field in ("$and", "$or"):
            if not isinstance(condition, list) or not all(isinstance(s, dict) for s in condition):
                raise QueryError(f"{field} requires an array of selectors")
            for sub_selector in condition:
                _validate(sub_selector)
        elif field.startswith("$"):
            raise QueryError(f"unsupported top-level operator {field}")
        elif _is_operator_object(condition):
            for op, operand in condition.items():
                if op not in OPERATORS:
                    raise QueryError(f"unsupported operator {op}")
                if op in ("$in", "$nin"):
                    _operand_list(op, operand)


def _is_operator_object(condition: Any) -> bool:
    return isinstance(condition, dict) and any(k.startswith("$") for k in condition)


def _lookup(document: Dict[str, Any], field: str) -> Any:
    value: Any = document
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def matches(selector: Dict[str, Any], document: Any) -> bool:
    """
    Evaluate a parsed selector against a decoded document.
    """
    if not isinstance(document, dict):
        return False

    for field, condition in selector.items():
        if field == "$and":
            if not all(matches(sub, document) for sub in condition):
                return False
        elif field == "$or":
            if not any(matches(sub, document) for sub in condition):
                return False
        elif _is_operator_object(condition):
            value = _lookup(document, field)
            for op, operand in condition.items():
                if not OPERATORS[op](value, operand):
                    return False
        elif not OPERATORS["$eq"](_lookup(document, field), condition):
            return False
    return True


def decode_document(value: bytes) -> Optional[Any]:
    """
    Decode stored bytes as JSON, or None when they are not JSON.
    """
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return None
