"""Tests for the page-break validator."""

from conftest import make_role

from resume_pages.models import ResumeDocument, ResumeHeader
from resume_pages.pdf.builder import paginate_document
from resume_pages.pdf.pdf_settings import TemplateConfig, TemplateRules
from resume_pages.pdf.pdf_types import (
    ExperienceEntryBlock,
    HeaderBlock,
    Page,
    PageSet,
    SectionTitleBlock,
)
from resume_pages.pdf.pdf_validation import validate

HEADER = HeaderBlock(ResumeHeader(name="Jane Doe"))
ROLE = ExperienceEntryBlock(entries=(make_role(1),), key="experience:1")


def _page(blocks, heights, capacity=971.0) -> Page:
    return Page(blocks=list(blocks), heights=list(heights), capacity=capacity)


def test_scenario_b_header_only_document_warns(config) -> None:
    result = paginate_document(ResumeDocument.empty(), config, strategy="estimated")

    assert result.page_count == 1
    assert result.report.valid
    assert "Page 1: only header present, add more content" in result.report.warnings


def test_clean_layout_has_no_findings() -> None:
    report = validate([_page([HEADER, ROLE], [80, 300])])

    assert report.valid
    assert report.errors == []
    assert report.warnings == []


def test_blank_page_before_the_end_is_an_error() -> None:
    report = validate([_page([], []), _page([HEADER], [80])])

    assert report.errors == ["Page 1: blank page detected"]


def test_orphan_warning_when_page_is_nearly_full() -> None:
    report = validate([_page([HEADER, ROLE], [80, 880])])

    assert report.warnings == ["Page 1: possible orphaned heading/content near page bottom"]


def test_overflowing_page_reports_error_not_orphan() -> None:
    report = validate([_page([ROLE], [1000.5])])

    assert report.errors == ["Page 1: content exceeds capacity by 29.5px"]
    assert report.warnings == []


def test_trailing_section_title_is_flagged() -> None:
    title = SectionTitleBlock("SKILLS", "skills", key="title:skills")

    report = validate([_page([HEADER, ROLE, title], [80, 300, 40])])

    assert report.warnings == ["Page 1: section title 'SKILLS' has no content after it"]


def test_rules_supply_thresholds() -> None:
    config = TemplateConfig(rules=TemplateRules(soft_max_pages=1, orphan_threshold_px=500))
    pages = PageSet([_page([HEADER, ROLE], [80, 300]), _page([ROLE], [600])], 971)

    report = validate(pages, config)

    assert report.warnings == [
        "Page 2: possible orphaned heading/content near page bottom",
        "Document spans 2 pages; consider condensing.",
    ]
