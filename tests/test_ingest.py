"""Tests for loading and cleaning résumé JSON."""

import json

import pytest

from resume_pages.cleaning import clean_text, normalize_whitespace, strip_markup
from resume_pages.ingest import document_from_mapping, load_document
from resume_pages.models import SkillCategory
from resume_pages.pdf.builder import paginate_document
from resume_pages.pdf.pdf_measure import ESTIMATED
from resume_pages.pdf.pdf_types import SkillsCategoryBlock
from resume_pages.text import SOFT_HYPHEN, hyphenate_text, hyphenator_for, paragraph_markup

LEGACY_PAYLOAD = {
    "basics": {
        "fullName": "Jane  Doe",
        "targetRole": "Backend Engineer",
        "email": "jane@example.com",
        "phone": "555 0100",
        "github": "",
    },
    "photoUrl": "https://example.com/me.png",
    "summary": "<p>Builds <b>reliable</b> systems.</p>",
    "skills": ["Python", "Go", {"category": "Cloud", "items": ["AWS", ""]}],
    "experience": [
        {
            "id": "e1",
            "position": "Engineer",
            "company": "Acme",
            "startDate": "2020",
            "endDate": "Present",
            "highlights": ["• Shipped v2", "  ", "Cut latency by 40%"],
        }
    ],
    "projects": [{"id": "p1", "name": "Ledger", "description": "Double-entry ledger"}],
    "education": [
        {"institution": "State University", "degree": "BSc", "field": "Physics", "graduationDate": "2016"}
    ],
}


def test_legacy_camel_case_payload() -> None:
    document = document_from_mapping(LEGACY_PAYLOAD)

    assert document.header.name == "Jane Doe"
    assert document.header.title == "Backend Engineer"
    assert document.header.github is None
    assert document.header.photo_url == "https://example.com/me.png"
    assert document.summary == "Builds reliable systems."
    assert [c.category for c in document.skills] == ["Skills", "Cloud"]
    assert document.skills[0].items == ("Python", "Go")
    assert document.skills[1].items == ("AWS",)
    role = document.experience[0]
    assert (role.role, role.start_date, role.end_date) == ("Engineer", "2020", "Present")
    assert role.bullets == ("Shipped v2", "Cut latency by 40%")
    assert document.projects[0].title == "Ledger"
    assert document.projects[0].bullets == ("Double-entry ledger",)
    assert document.education[0].degree == "BSc in Physics"
    assert document.education[0].year == "2016"


def test_snake_case_payload_and_missing_sections() -> None:
    document = document_from_mapping(
        {"header": {"name": "Sam", "title": "PM", "photo_url": None}, "experience": None}
    )

    assert document.header.name == "Sam"
    assert document.experience == ()
    assert document.skills == ()
    assert document.summary == ""


def test_non_mapping_is_rejected() -> None:
    with pytest.raises(TypeError):
        document_from_mapping(["not", "a", "mapping"])


def test_skills_mapping_is_read_as_category_to_items() -> None:
    document = document_from_mapping(
        {"skills": {"Languages": ["Python", " Go "], "Cloud": ["AWS", ""]}}
    )

    assert document.skills == (
        SkillCategory("Languages", ("Python", "Go")),
        SkillCategory("Cloud", ("AWS",)),
    )


def test_skills_mapping_reaches_the_pages(config) -> None:
    document = document_from_mapping(
        {"header": {"name": "Sam"}, "skills": {"Languages": ["Python"], "Cloud": ["AWS"]}}
    )

    result = paginate_document(document, config, strategy=ESTIMATED)

    categories = [
        block.category for block in result.page_set.blocks() if isinstance(block, SkillsCategoryBlock)
    ]
    assert [c.category for c in categories] == ["Languages", "Cloud"]
    assert [c.items for c in categories] == [("Python",), ("AWS",)]


def test_load_document_reads_json(tmp_path) -> None:
    path = tmp_path / "resume.json"
    path.write_text(json.dumps(LEGACY_PAYLOAD), encoding="utf-8")

    assert load_document(path) == document_from_mapping(LEGACY_PAYLOAD)


def test_cleaning_helpers() -> None:
    assert normalize_whitespace(f"a{chr(0xA0)}b{chr(0x200B)}c\n d") == "a bc d"
    assert strip_markup("5 < 6 & 7") == "5 < 6 & 7"
    assert clean_text("<li>• Led   a team</li>") == "Led a team"


def test_paragraph_markup_escapes_and_hyphenates() -> None:
    dic = hyphenator_for()

    markup = paragraph_markup("R&D <internationalization>", dic)

    assert "&amp;" in markup
    assert "&lt;" in markup
    assert SOFT_HYPHEN in markup
    assert hyphenate_text("short words only", dic) == "short words only"
