"""
Helpers that turn résumé JSON into typed, cleaned documents.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Tuple

from .cleaning import clean_text
from .models import (
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeDocument,
    ResumeHeader,
    SkillCategory,
)

DEFAULT_SKILL_CATEGORY = "Skills"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among ``keys``.

    Example:
        >>> _pick({"startDate": "2020"}, "start_date", "startDate")
        '2020'
    """

    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _text(value: Any) -> str:
    """Return a cleaned string for any scalar JSON value."""

    if value is None:
        return ""
    return clean_text(str(value))


def _optional_text(value: Any) -> str | None:
    """Return cleaned text, or None when nothing is left."""

    text = _text(value)
    return text or None


def _text_list(values: Any) -> Tuple[str, ...]:
    """Return cleaned, non-empty strings from a list or a newline block.

    Example:
        >>> _text_list("• Led a team\\n\\n• Shipped v2")
        ('Led a team', 'Shipped v2')
    """

    if values is None:
        return ()
    if isinstance(values, str):
        values = values.splitlines()
    cleaned = (_text(value) for value in values)
    return tuple(value for value in cleaned if value)


def _header(data: Mapping[str, Any]) -> ResumeHeader:
    """Build the header from ``header`` or the legacy ``basics`` mapping.

    Args:
        data: Whole document mapping.
    Returns:
        ResumeHeader with cleaned fields.
    """

    raw = _pick(data, "header", "basics", default={})
    return ResumeHeader(
        name=_text(_pick(raw, "name", "fullName", "full_name")),
        title=_text(_pick(raw, "title", "targetRole", "target_role")),
        email=_text(raw.get("email")),
        phone=_text(raw.get("phone")),
        linkedin=_optional_text(raw.get("linkedin")),
        github=_optional_text(raw.get("github")),
        photo_url=_optional_text(
            _pick(raw, "photo_url", "photoUrl", default=_pick(data, "photo_url", "photoUrl"))
        ),
    )


def _skills(values: Iterable[Any] | Mapping[str, Any]) -> Tuple[SkillCategory, ...]:
    """Return skill categories; bare strings are gathered into one category.

    A mapping is read as category name to items, in key order.

    Example:
        >>> _skills(["Python", {"category": "Cloud", "items": ["AWS"]}])[0].items
        ('Python',)
        >>> _skills({"Cloud": ["AWS", "GCP"]})[0].items
        ('AWS', 'GCP')
    """

    if isinstance(values, Mapping):
        return tuple(
            SkillCategory(category=_text(category), items=_text_list(items))
            for category, items in values.items()
        )
    categories: List[SkillCategory] = []
    loose: List[str] = []
    for value in values:
        if isinstance(value, Mapping):
            categories.append(
                SkillCategory(
                    category=_text(_pick(value, "category", "name")),
                    items=_text_list(value.get("items")),
                )
            )
            continue
        text = _text(value)
        if text:
            loose.append(text)
    if loose:
        categories.insert(0, SkillCategory(category=DEFAULT_SKILL_CATEGORY, items=tuple(loose)))
    return tuple(categories)


def _experience(raw: Mapping[str, Any]) -> ExperienceItem:
    return ExperienceItem(
        role=_text(_pick(raw, "role", "position")),
        company=_text(raw.get("company")),
        start_date=_text(_pick(raw, "start_date", "startDate")),
        end_date=_text(_pick(raw, "end_date", "endDate")),
        bullets=_text_list(_pick(raw, "bullets", "highlights")),
        location=_optional_text(raw.get("location")),
        id=_optional_text(raw.get("id")),
    )


def _project(raw: Mapping[str, Any]) -> ProjectItem:
    bullets = _pick(raw, "bullets", "description")
    return ProjectItem(
        title=_text(_pick(raw, "title", "name")),
        bullets=_text_list(bullets),
        tech=_text_list(raw.get("tech")),
        id=_optional_text(raw.get("id")),
    )


def _education(raw: Mapping[str, Any]) -> EducationItem:
    degree = _text(raw.get("degree"))
    field = _text(raw.get("field"))
    if field and field not in degree:
        degree = f"{degree} in {field}" if degree else field
    return EducationItem(
        degree=degree,
        institute=_text(_pick(raw, "institute", "institution")),
        year=_text(_pick(raw, "year", "graduationDate", "graduation_date")),
        id=_optional_text(raw.get("id")),
    )


def document_from_mapping(data: Mapping[str, Any]) -> ResumeDocument:
    """Create a normalized document from a JSON-like mapping.

    Snake_case and the legacy camelCase keys (``startDate``, ``endDate``,
    ``photoUrl``, ``basics.fullName`` ...) are both accepted. Every string
    is cleaned; missing sections become empty tuples.

    Args:
        data: Parsed résumé JSON.
    Returns:
        ResumeDocument ready for decomposition.
    Raises:
        TypeError: ``data`` is not a mapping.
    """

    if not isinstance(data, Mapping):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")
    return ResumeDocument(
        header=_header(data),
        summary=_text(data.get("summary")),
        skills=_skills(data.get("skills") or ()),
        experience=tuple(_experience(item) for item in data.get("experience") or ()),
        projects=tuple(_project(item) for item in data.get("projects") or ()),
        education=tuple(_education(item) for item in data.get("education") or ()),
    )


def load_document(path: Path) -> ResumeDocument:
    """Load a résumé JSON file.

    Example:
        >>> load_document(Path("examples/resume.json"))  # doctest: +SKIP
    """

    return document_from_mapping(json.loads(path.read_text(encoding="utf-8")))
