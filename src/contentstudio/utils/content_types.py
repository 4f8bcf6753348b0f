"""Content type identifier resolution.

Callers and stored rows refer to content types as integer ids, numeric
strings or names in any case. These helpers produce the lookup candidates used
to find existing content and compare two identifiers loosely.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from contentstudio.models.content import ContentType

logger = logging.getLogger(__name__)

NameResolver = Callable[[Iterable[int]], Dict[int, str]]


def _coerce_int(value: Any) -> Optional[int]:
    """Numeric coercion of an identifier, None when it is not a whole number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, ContentType):
        return value.type_id
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


def _append_unique(candidates: List[Any], value: Any) -> None:
    # 2 and "2" are distinct candidates, so compare by type as well as value
    key = (type(value), value)
    if all((type(existing), existing) != key for existing in candidates):
        candidates.append(value)


def resolve_type_candidates(raw: Any, name_resolver: Optional[NameResolver] = None) -> List[Any]:
    """Build the ordered candidate list for a raw content type identifier.

    Order: the original value, its numeric coercion, its lowercased string
    form, then the canonical name reported by ``name_resolver`` and that
    name lowercased. Duplicates are dropped.

    Args:
        raw: Identifier as submitted (e.g. 2, "2", "Code")
        name_resolver: Optional ``ContentRepository.get_content_type_names_by_ids``

    Returns:
        Candidate identifiers; never raises
    """
    candidates: List[Any] = []
    if raw is None:
        return candidates

    original = raw.value if isinstance(raw, ContentType) else raw
    _append_unique(candidates, original)

    numeric = _coerce_int(raw)
    if numeric is not None:
        _append_unique(candidates, numeric)

    text = str(original).strip()
    if text:
        _append_unique(candidates, text.lower())

    if name_resolver is not None and numeric is not None:
        try:
            names = name_resolver([numeric]) or {}
        except Exception as e:
            logger.warning(f"Content type name lookup failed for id={numeric}: {e}")
            names = {}
        name = names.get(numeric)
        if name:
            _append_unique(candidates, name)
            _append_unique(candidates, name.lower())

    return candidates


def _match_keys(value: Any) -> Set[Tuple[str, Any]]:
    if value is None or isinstance(value, bool):
        return set()
    if isinstance(value, ContentType):
        return {("num", value.type_id), ("text", value.value)}

    keys: Set[Tuple[str, Any]] = set()
    numeric = _coerce_int(value)
    if numeric is not None:
        keys.add(("num", numeric))
    text = str(value).strip().lower()
    if text:
        keys.add(("text", text))
    return keys


def content_types_match(a: Any, b: Any) -> bool:
    """Loose equality of two content type identifiers.

    Numeric equality, case-insensitive string equality and numeric-coercion
    equality all count as a match. A ``ContentType`` matches both its id and
    its name.

    Example:
        >>> content_types_match(2, "2"), content_types_match("Code", ContentType.CODE)
        (True, True)
    """
    if a is None or b is None:
        return False
    if a == b:
        return True
    return bool(_match_keys(a) & _match_keys(b))


def canonical_content_type(raw: Any) -> Optional[ContentType]:
    """Normalize to ``ContentType`` or return None for unknown identifiers."""
    try:
        return ContentType.from_identifier(raw)
    except ValueError:
        return None
