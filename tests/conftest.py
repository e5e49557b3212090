from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is importable when pytest runs via its entrypoint,
# where `sys.path[0]` may not be the repo root.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from resume_pages.models import (  # noqa: E402
    EducationItem,
    ExperienceItem,
    ProjectItem,
    ResumeDocument,
    ResumeHeader,
    SkillCategory,
)
from resume_pages.pdf.pdf_settings import TemplateConfig, build_typography  # noqa: E402


def make_role(index: int, *, bullets: int = 3) -> ExperienceItem:
    return ExperienceItem(
        role=f"Engineer {index}",
        company=f"Company {index}",
        start_date="Jan 2020",
        end_date="Present",
        bullets=tuple(f"Delivered outcome {n} for team {index}" for n in range(bullets)),
        id=f"exp-{index}",
    )


@pytest.fixture()
def config() -> TemplateConfig:
    return TemplateConfig()


@pytest.fixture()
def typography(config):
    return build_typography(config)


@pytest.fixture()
def sample_document() -> ResumeDocument:
    return ResumeDocument(
        header=ResumeHeader(
            name="Jane Doe",
            title="Senior Backend Engineer",
            email="jane@example.com",
            phone="+1 555 0100",
            linkedin="linkedin.com/in/janedoe",
        ),
        summary="Backend engineer with eight years of experience building payment systems.",
        skills=(
            SkillCategory("Languages", ("Python", "Go", "SQL")),
            SkillCategory("Cloud", ("AWS", "Terraform")),
        ),
        experience=(make_role(1), make_role(2)),
        projects=(
            ProjectItem(
                title="Ledger service",
                bullets=("Designed a double-entry ledger",),
                tech=("Python", "PostgreSQL"),
                id="p1",
            ),
        ),
        education=(
            EducationItem(degree="BSc Computer Science", institute="State University", year="2016"),
        ),
    )
