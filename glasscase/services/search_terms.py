from __future__ import annotations

from ..models.item import ItemAttributes, category_phrase


def _join(*parts: str | None) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


def _present(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def generate(attrs: ItemAttributes) -> list[str]:
    """Build marketplace query strings for an item, most relevant first.

    Order: category-combined terms, then manufacturer-qualified, then
    pattern-qualified. The category phrase is appended to any candidate that
    lacks it so no query ever runs as a bare name or brand search.
    """
    category = category_phrase(attrs.category)
    name = attrs.name.strip()
    manufacturer = _present(attrs.manufacturer)
    pattern = _present(attrs.pattern)

    candidates = [
        _join(name, category),
        _join(category, name),
        _join("vintage", category, name),
    ]
    if manufacturer:
        candidates += [
            _join(manufacturer, category),
            _join(manufacturer, name, category),
            _join(category, manufacturer),
            _join(manufacturer, name),
            _join(name, manufacturer),
        ]
    if pattern:
        candidates += [
            _join(pattern, category),
            _join(category, pattern),
        ]

    terms: list[str] = []
    seen: set[str] = set()
    for term in candidates:
        if category and category not in term:
            term = _join(term, category)
        if not term or term in seen:
            continue
        seen.add(term)
        terms.append(term)
    return terms
