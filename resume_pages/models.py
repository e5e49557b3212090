"""
Typed containers for normalized résumé content.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True, slots=True)
class ResumeHeader:
    """Name, target role, and contact fields shown at the top of page 1.

    Attributes:
        name: Candidate name.
        title: Target role shown under the name.
        email: Contact email.
        phone: Contact phone.
        linkedin: Optional LinkedIn URL or handle.
        github: Optional GitHub URL or handle.
        photo_url: Optional photo URL; layout reserves no extra height for it.
    """

    name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str | None = None
    github: str | None = None
    photo_url: str | None = None

    def contact_parts(self) -> Tuple[str, ...]:
        """Return non-empty contact fields in display order."""
        parts = (self.email, self.phone, self.linkedin or "", self.github or "")
        return tuple(part for part in parts if part)


@dataclass(frozen=True, slots=True)
class SkillCategory:
    """A labelled group of skills, e.g. 'Databases: PostgreSQL, Redis'."""

    category: str
    items: Tuple[str, ...] = ()

    def visible_items(self) -> Tuple[str, ...]:
        """Return items with blanks removed.

        Example:
            >>> SkillCategory('Tools', ('git', '', 'docker')).visible_items()
            ('git', 'docker')
        """

        return tuple(item for item in self.items if item)


@dataclass(frozen=True, slots=True)
class ExperienceItem:
    """One role held at one company."""

    role: str
    company: str
    start_date: str = ""
    end_date: str = ""
    bullets: Tuple[str, ...] = ()
    location: str | None = None
    id: str | None = None

    def date_range(self) -> str:
        """Return a human-friendly range, e.g. 'Jan 2020 – Present'.

        Example:
            >>> ExperienceItem('Engineer', 'Acme', '2020', '').date_range()
            '2020'
        """

        return " – ".join(part for part in (self.start_date, self.end_date) if part)


@dataclass(frozen=True, slots=True)
class ProjectItem:
    """A project with bullets and an optional technology list."""

    title: str
    bullets: Tuple[str, ...] = ()
    tech: Tuple[str, ...] = ()
    id: str | None = None


@dataclass(frozen=True, slots=True)
class EducationItem:
    """A degree entry."""

    degree: str
    institute: str
    year: str = ""
    id: str | None = None


@dataclass(frozen=True, slots=True)
class ResumeDocument:
    """Top-level normalized résumé consumed by the layout engine."""

    header: ResumeHeader = field(default_factory=ResumeHeader)
    summary: str = ""
    skills: Tuple[SkillCategory, ...] = ()
    experience: Tuple[ExperienceItem, ...] = ()
    projects: Tuple[ProjectItem, ...] = ()
    education: Tuple[EducationItem, ...] = ()

    @classmethod
    def empty(cls) -> "ResumeDocument":
        """Return a document with a blank header and no sections."""
        return cls()
