"""Turn a normalized résumé into the ordered blocks used for pagination."""

from __future__ import annotations

from typing import List

from ..models import ResumeDocument
from .pdf_settings import TemplateConfig
from .pdf_types import (
    Block,
    EducationEntryBlock,
    ExperienceEntryBlock,
    HeaderBlock,
    ProjectEntryBlock,
    SectionTitleBlock,
    SkillsCategoryBlock,
    SummaryBlock,
)

SECTION_LABELS = (
    ("skills", "Skills"),
    ("experience", "Experience"),
    ("projects", "Projects"),
    ("education", "Education"),
)


def section_title(label: str, *, case: str) -> str:
    """Apply the template's title case rule to a section label.

    Example:
        >>> section_title("Experience", case="uppercase")
        'EXPERIENCE'
    """

    if case == "uppercase":
        return label.upper()
    if case == "lowercase":
        return label.lower()
    return label.title()


def decompose(document: ResumeDocument, config: TemplateConfig) -> List[Block]:
    """Return the ordered block sequence for ``document``.

    Header first, then the summary when it has text, then each non-empty
    section as a title followed by one block per item in original order.
    Sections without items produce nothing, not even a title.

    Args:
        document: Normalized résumé.
        config: Template whose rules shape titles and grouping.
    Returns:
        List of blocks; identical input yields identical output.
    """

    blocks: List[Block] = [HeaderBlock(header=document.header)]
    if document.summary.strip():
        blocks.append(SummaryBlock(text=document.summary.strip()))
    case = config.rules.section_title_case
    for section, label in SECTION_LABELS:
        items = _section_blocks(document=document, section=section, config=config)
        if not items:
            continue
        title = section_title(label, case=case)
        blocks.append(SectionTitleBlock(title=title, section=section, key=f"title:{section}"))
        blocks.extend(items)
    return blocks


def _section_blocks(
    *, document: ResumeDocument, section: str, config: TemplateConfig
) -> List[Block]:
    """Return item blocks for one section.

    Args:
        document: Normalized résumé.
        section: Section name.
        config: Template configuration.
    Returns:
        Item blocks without the section title.
    """

    if section == "skills":
        return [
            SkillsCategoryBlock(category=category, key=f"skills:{idx}")
            for idx, category in enumerate(document.skills)
            if category.visible_items()
        ]
    if section == "experience":
        if not document.experience:
            return []
        if config.rules.experience_as_section:
            return [ExperienceEntryBlock(entries=tuple(document.experience), key="experience")]
        return [
            ExperienceEntryBlock(entries=(item,), key=f"experience:{item.id or idx}")
            for idx, item in enumerate(document.experience)
        ]
    if section == "projects":
        return [
            ProjectEntryBlock(project=item, key=f"project:{item.id or idx}")
            for idx, item in enumerate(document.projects)
        ]
    if section == "education":
        return [
            EducationEntryBlock(education=item, key=f"education:{item.id or idx}")
            for idx, item in enumerate(document.education)
        ]
    raise ValueError(f"unknown section {section!r}")
