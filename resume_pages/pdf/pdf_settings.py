"""Templates, fonts, styles, and page geometry for résumé layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..errors import ConfigurationError
from ..layout_utils import px_to_pt
from .pdf_constants import (
    A4_HEIGHT_PX,
    A4_WIDTH_PX,
    DEFAULT_PADDING_HORIZONTAL_PX,
    DEFAULT_PADDING_VERTICAL_PX,
    ORPHAN_THRESHOLD_PX,
    SOFT_MAX_PAGES,
)

SECTION_TITLE_CASES = ("uppercase", "capitalize", "lowercase")


@dataclass(frozen=True, slots=True)
class PagePadding:
    """Padding between the page edge and the content box, in px."""

    top: float = DEFAULT_PADDING_VERTICAL_PX
    right: float = DEFAULT_PADDING_HORIZONTAL_PX
    bottom: float = DEFAULT_PADDING_VERTICAL_PX
    left: float = DEFAULT_PADDING_HORIZONTAL_PX


@dataclass(frozen=True, slots=True)
class PageMargins:
    """Vertical gaps inserted before sections and before entries, in px."""

    section: float = 16.0
    entry: float = 12.0


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Page size and content box.

    Example:
        >>> PageGeometry().capacity
        971.0
    """

    width: float = A4_WIDTH_PX
    height: float = A4_HEIGHT_PX
    padding: PagePadding = field(default_factory=PagePadding)
    margins: PageMargins = field(default_factory=PageMargins)

    @property
    def capacity(self) -> float:
        """Return the vertical pixel budget for content on one page.

        Returns:
            Page height minus top and bottom padding.
        """

        return self.height - self.padding.top - self.padding.bottom

    @property
    def content_width(self) -> float:
        """Return the width available for content inside the padding.

        Returns:
            Width in px.
        """

        return self.width - self.padding.left - self.padding.right


@dataclass(frozen=True, slots=True)
class FontSizes:
    """Font sizes in px for each text role."""

    name: float = 22.0
    section_title: float = 13.0
    job_title: float = 11.0
    body: float = 10.5
    caption: float = 9.0


@dataclass(frozen=True, slots=True)
class LineHeights:
    """Line-height multipliers."""

    tight: float = 1.2
    normal: float = 1.4
    relaxed: float = 1.6


@dataclass(frozen=True, slots=True)
class Typography:
    """Font family plus sizes and line heights."""

    font_family: str = "Helvetica"
    sizes: FontSizes = field(default_factory=FontSizes)
    line_heights: LineHeights = field(default_factory=LineHeights)


@dataclass(frozen=True, slots=True)
class TemplateRules:
    """Content and pagination rules attached to a template.

    Args:
        max_bullets_per_role: Bullet budget used by height estimates.
        section_title_case: One of ``uppercase``, ``capitalize``, ``lowercase``.
        chars_per_line: Average characters per body line for estimates.
        items_per_line: Average skills per line for estimates.
        orphan_threshold_px: Remaining space below which the validator warns.
        soft_max_pages: Page count above which the validator warns.
        experience_as_section: Emit the whole experience section as one
            splittable block instead of one block per role.
    """

    max_bullets_per_role: int = 5
    section_title_case: str = "uppercase"
    chars_per_line: int = 100
    items_per_line: int = 10
    orphan_threshold_px: float = ORPHAN_THRESHOLD_PX
    soft_max_pages: int = SOFT_MAX_PAGES
    experience_as_section: bool = False


@dataclass(frozen=True, slots=True)
class TemplateConfig:
    """Complete template configuration consumed by the layout engine.

    Example:
        >>> TemplateConfig().capacity
        971.0
    """

    id: str = "document"
    name: str = "Document"
    page: PageGeometry = field(default_factory=PageGeometry)
    typography: Typography = field(default_factory=Typography)
    rules: TemplateRules = field(default_factory=TemplateRules)

    @property
    def capacity(self) -> float:
        """Return the per-page content height in px."""
        return self.page.capacity

    @property
    def content_width(self) -> float:
        """Return the content width in px."""
        return self.page.content_width

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TemplateConfig":
        """Build a config from a nested mapping such as a template JSON file.

        Both camelCase and snake_case keys are accepted. Page dimensions and
        padding are required; typography and rules fall back to defaults.

        Args:
            data: Nested template mapping.
        Returns:
            Validated TemplateConfig.
        Raises:
            ConfigurationError: Required page fields are missing or invalid.
        """

        page_data = data.get("page")
        if not isinstance(page_data, Mapping):
            raise ConfigurationError("template is missing the 'page' section")
        config = cls(
            id=str(data.get("id", "custom")),
            name=str(data.get("name", data.get("id", "Custom"))),
            page=_geometry_from_mapping(page_data),
            typography=_typography_from_mapping(data.get("typography") or {}),
            rules=_rules_from_mapping(data.get("rules") or {}),
        )
        validate_config(config)
        return config


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key among ``keys``.

    Args:
        data: Mapping to search.
        keys: Candidate keys in priority order.
        default: Value when no key is present.
    Returns:
        The matched value or ``default``.
    """

    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _required_number(data: Mapping[str, Any], key: str, *, where: str) -> float:
    """Return a required numeric field or raise ConfigurationError.

    Args:
        data: Mapping holding the field.
        key: Field name.
        where: Dotted path used in the error message.
    Returns:
        The field as float.
    """

    value = data.get(key)
    if value is None:
        raise ConfigurationError(f"missing required field '{where}.{key}'")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{where}.{key}' must be a number, got {value!r}") from exc


def _geometry_from_mapping(page: Mapping[str, Any]) -> PageGeometry:
    """Return PageGeometry from the template's ``page`` mapping.

    Args:
        page: Page mapping with width, height, padding and optional margins.
    Returns:
        PageGeometry instance.
    """

    padding = page.get("padding")
    if not isinstance(padding, Mapping):
        raise ConfigurationError("missing required field 'page.padding'")
    margins = page.get("margins") or {}
    default_margins = PageMargins()
    return PageGeometry(
        width=_required_number(page, "width", where="page"),
        height=_required_number(page, "height", where="page"),
        padding=PagePadding(
            top=_required_number(padding, "top", where="page.padding"),
            right=_required_number(padding, "right", where="page.padding"),
            bottom=_required_number(padding, "bottom", where="page.padding"),
            left=_required_number(padding, "left", where="page.padding"),
        ),
        margins=PageMargins(
            section=float(margins.get("section", default_margins.section)),
            entry=float(margins.get("entry", default_margins.entry)),
        ),
    )


def _typography_from_mapping(data: Mapping[str, Any]) -> Typography:
    """Return Typography from a template's ``typography`` mapping."""

    defaults = FontSizes()
    sizes = data.get("sizes") or {}
    heights = _pick(data, "lineHeights", "line_heights", default={})
    base_heights = LineHeights()
    return Typography(
        font_family=str(_pick(data, "fontFamily", "font_family", default="Helvetica")),
        sizes=FontSizes(
            name=float(sizes.get("name", defaults.name)),
            section_title=float(
                _pick(sizes, "sectionTitle", "section_title", default=defaults.section_title)
            ),
            job_title=float(_pick(sizes, "jobTitle", "job_title", default=defaults.job_title)),
            body=float(sizes.get("body", defaults.body)),
            caption=float(sizes.get("caption", defaults.caption)),
        ),
        line_heights=LineHeights(
            tight=float(heights.get("tight", base_heights.tight)),
            normal=float(heights.get("normal", base_heights.normal)),
            relaxed=float(heights.get("relaxed", base_heights.relaxed)),
        ),
    )


def _rules_from_mapping(data: Mapping[str, Any]) -> TemplateRules:
    """Return TemplateRules from a template's ``rules`` mapping."""

    base = TemplateRules()
    return TemplateRules(
        max_bullets_per_role=int(
            _pick(data, "maxBulletsPerRole", "max_bullets_per_role", default=base.max_bullets_per_role)
        ),
        section_title_case=str(
            _pick(data, "sectionTitleCase", "section_title_case", default=base.section_title_case)
        ),
        chars_per_line=int(_pick(data, "charsPerLine", "chars_per_line", default=base.chars_per_line)),
        items_per_line=int(_pick(data, "itemsPerLine", "items_per_line", default=base.items_per_line)),
        orphan_threshold_px=float(
            _pick(data, "orphanThresholdPx", "orphan_threshold_px", default=base.orphan_threshold_px)
        ),
        soft_max_pages=int(_pick(data, "softMaxPages", "soft_max_pages", default=base.soft_max_pages)),
        experience_as_section=bool(
            _pick(data, "experienceAsSection", "experience_as_section", default=False)
        ),
    )


def config_problems(config: TemplateConfig) -> List[str]:
    """Return human-readable problems that make a template unusable.

    Args:
        config: Template to check.
    Returns:
        List of problems; empty when the template is usable.
    """

    problems: List[str] = []
    page = config.page
    if page.width != A4_WIDTH_PX:
        problems.append(f"page width {page.width:g}px does not match the A4 format ({A4_WIDTH_PX}px)")
    if page.height != A4_HEIGHT_PX:
        problems.append(f"page height {page.height:g}px does not match the A4 format ({A4_HEIGHT_PX}px)")
    padding = page.padding
    if min(padding.top, padding.right, padding.bottom, padding.left) < 0:
        problems.append("page padding cannot be negative")
    if page.content_width <= 0:
        problems.append(f"horizontal padding {padding.left + padding.right:g}px exceeds page width")
    if page.capacity <= 0:
        problems.append(f"vertical padding {padding.top + padding.bottom:g}px exceeds page height")
    if page.margins.section < 0 or page.margins.entry < 0:
        problems.append("section and entry margins cannot be negative")
    sizes = config.typography.sizes
    for label, value in (
        ("name", sizes.name),
        ("section_title", sizes.section_title),
        ("job_title", sizes.job_title),
        ("body", sizes.body),
        ("caption", sizes.caption),
    ):
        if value <= 0:
            problems.append(f"font size '{label}' must be positive")
    heights = config.typography.line_heights
    if min(heights.tight, heights.normal, heights.relaxed) <= 0:
        problems.append("line heights must be positive")
    rules = config.rules
    if rules.max_bullets_per_role <= 0:
        problems.append("max_bullets_per_role must be positive")
    if rules.chars_per_line <= 0 or rules.items_per_line <= 0:
        problems.append("chars_per_line and items_per_line must be positive")
    if rules.section_title_case not in SECTION_TITLE_CASES:
        problems.append(f"unknown section_title_case {rules.section_title_case!r}")
    return problems


def validate_config(config: TemplateConfig) -> TemplateConfig:
    """Fail fast when a template cannot be laid out.

    Args:
        config: Template to check.
    Returns:
        The same config, for chaining.
    Raises:
        ConfigurationError: One or more problems were found.
    """

    problems = config_problems(config)
    if problems:
        raise ConfigurationError(problems)
    return config


TEMPLATE_CONFIGS: Dict[str, TemplateConfig] = {
    "document": TemplateConfig(),
    "classic": TemplateConfig(
        id="classic",
        name="Classic ATS",
        page=PageGeometry(
            padding=PagePadding(top=48, right=48, bottom=48, left=48),
            margins=PageMargins(section=16, entry=12),
        ),
        typography=Typography(
            font_family="Inter, sans-serif",
            sizes=FontSizes(name=22, section_title=13, job_title=11, body=10.5, caption=9),
            line_heights=LineHeights(tight=1.2, normal=1.4, relaxed=1.6),
        ),
        rules=TemplateRules(max_bullets_per_role=5),
    ),
    "modern": TemplateConfig(
        id="modern",
        name="Modern Tech",
        page=PageGeometry(
            padding=PagePadding(top=40, right=40, bottom=40, left=40),
            margins=PageMargins(section=12, entry=10),
        ),
        typography=Typography(
            font_family="Inter, sans-serif",
            sizes=FontSizes(name=20, section_title=12, job_title=10.5, body=10, caption=8.5),
            line_heights=LineHeights(tight=1.15, normal=1.35, relaxed=1.5),
        ),
        rules=TemplateRules(max_bullets_per_role=4),
    ),
    "template1free": TemplateConfig(
        id="template1free",
        name="Professional Classic",
        page=PageGeometry(
            padding=PagePadding(top=32, right=28, bottom=28, left=28),
            margins=PageMargins(section=14, entry=10),
        ),
        typography=Typography(
            font_family="Inter, Arial, Helvetica, sans-serif",
            sizes=FontSizes(name=26, section_title=13, job_title=12, body=11, caption=10.5),
            line_heights=LineHeights(tight=1.3, normal=1.45, relaxed=1.6),
        ),
        rules=TemplateRules(max_bullets_per_role=4),
    ),
    "minimal": TemplateConfig(
        id="minimal",
        name="Minimal Executive",
        page=PageGeometry(
            padding=PagePadding(top=56, right=56, bottom=56, left=56),
            margins=PageMargins(section=24, entry=16),
        ),
        typography=Typography(
            font_family="Georgia, serif",
            sizes=FontSizes(name=24, section_title=14, job_title=12, body=11, caption=10),
            line_heights=LineHeights(tight=1.25, normal=1.5, relaxed=1.7),
        ),
        rules=TemplateRules(max_bullets_per_role=3, section_title_case="capitalize"),
    ),
}


def get_template_config(template_id: str) -> TemplateConfig:
    """Return a built-in template by id.

    Raises:
        ConfigurationError: The id is unknown.
    """

    try:
        return TEMPLATE_CONFIGS[template_id]
    except KeyError:
        known = ", ".join(sorted(TEMPLATE_CONFIGS))
        raise ConfigurationError(f"unknown template {template_id!r} (known: {known})") from None


def available_template_ids() -> List[str]:
    """Return the ids of all built-in templates."""
    return list(TEMPLATE_CONFIGS)


@dataclass(frozen=True, slots=True)
class FontFamily:
    """Registered ReportLab font names for one family."""

    regular: str
    bold: str
    italic: str


HELVETICA = FontFamily(regular="Helvetica", bold="Helvetica-Bold", italic="Helvetica-Oblique")
TIMES = FontFamily(regular="Times-Roman", bold="Times-Bold", italic="Times-Italic")

_SERIF_HINTS = ("georgia", "times", "garamond", "palatino", "cambria")


def builtin_family(font_family: str) -> FontFamily:
    """Map a CSS font-family list onto a ReportLab built-in family.

    Example:
        >>> builtin_family("'Georgia', serif").regular
        'Times-Roman'
    """

    lowered = font_family.lower()
    if "sans-serif" not in lowered and (
        any(hint in lowered for hint in _SERIF_HINTS) or "serif" in lowered
    ):
        return TIMES
    return HELVETICA


def register_font_family(
    *, name: str, regular_path: Path, bold_path: Path | None = None, italic_path: Path | None = None
) -> FontFamily | None:
    """Register a TrueType family with ReportLab.

    Args:
        name: Base name to register under.
        regular_path: Regular face file.
        bold_path: Optional bold face file; regular is reused when missing.
        italic_path: Optional italic face file; regular is reused when missing.
    Returns:
        The registered FontFamily, or None when the regular face is missing.
    """

    if not regular_path.exists():
        return None
    faces = {
        name: regular_path,
        f"{name}-Bold": bold_path if bold_path and bold_path.exists() else regular_path,
        f"{name}-Italic": italic_path if italic_path and italic_path.exists() else regular_path,
    }
    registered = pdfmetrics.getRegisteredFontNames()
    for face, path in faces.items():
        if face not in registered:
            pdfmetrics.registerFont(TTFont(face, str(path)))
    pdfmetrics.registerFontFamily(
        name,
        normal=name,
        bold=f"{name}-Bold",
        italic=f"{name}-Italic",
        boldItalic=f"{name}-Bold",
    )
    return FontFamily(regular=name, bold=f"{name}-Bold", italic=f"{name}-Italic")


def build_styles(config: TemplateConfig, fonts: FontFamily) -> Dict[str, ParagraphStyle]:
    """Create paragraph styles for every block part.

    Sizes come from the template in px and are converted to points.

    Args:
        config: Template configuration.
        fonts: Registered font family.
    Returns:
        Mapping of style keys to ParagraphStyle objects.
    """

    base = getSampleStyleSheet()
    sizes = config.typography.sizes
    lh = config.typography.line_heights

    def style(key: str, *, font: str, size: float, leading: float, **extra: Any) -> ParagraphStyle:
        return ParagraphStyle(
            key,
            parent=base["Normal"],
            fontName=font,
            fontSize=px_to_pt(size),
            leading=px_to_pt(size * leading),
            spaceBefore=0,
            spaceAfter=0,
            alignment=extra.pop("alignment", TA_LEFT),
            embeddedHyphenation=1,
            **extra,
        )

    muted = colors.HexColor("#555555")
    return {
        "name": style("name", font=fonts.bold, size=sizes.name, leading=lh.tight),
        "target_role": style("target_role", font=fonts.regular, size=sizes.job_title, leading=lh.normal),
        "contact": style("contact", font=fonts.regular, size=sizes.caption, leading=lh.normal, textColor=muted),
        "section_title": style(
            "section_title", font=fonts.bold, size=sizes.section_title, leading=lh.tight
        ),
        "summary": style("summary", font=fonts.regular, size=sizes.body, leading=lh.relaxed),
        "entry_role": style("entry_role", font=fonts.bold, size=sizes.job_title, leading=lh.tight),
        "entry_meta": style(
            "entry_meta", font=fonts.italic, size=sizes.caption, leading=lh.normal, textColor=muted
        ),
        "entry_date": style(
            "entry_date",
            font=fonts.regular,
            size=sizes.caption,
            leading=lh.normal,
            alignment=TA_RIGHT,
            textColor=muted,
        ),
        "bullet": style(
            "bullet",
            font=fonts.regular,
            size=sizes.body,
            leading=lh.normal,
            leftIndent=px_to_pt(14),
            bulletIndent=px_to_pt(3),
        ),
        "skills": style("skills", font=fonts.regular, size=sizes.body, leading=lh.normal),
        "tech": style("tech", font=fonts.italic, size=sizes.caption, leading=lh.normal, textColor=muted),
    }


@dataclass(slots=True)
class TypographyContext:
    """Live rendering context: a validated template plus registered fonts.

    Args:
        config: Template configuration.
        fonts: Font family used for every style.
        styles: Paragraph styles derived from the template.
        font_epoch: Bumped whenever font loading changes metrics.
    """

    config: TemplateConfig
    fonts: FontFamily
    styles: Dict[str, ParagraphStyle]
    font_epoch: int = 0

    @property
    def content_width_pt(self) -> float:
        """Return the content box width in points."""
        return px_to_pt(self.config.content_width)

    @property
    def fingerprint(self) -> tuple[TemplateConfig, FontFamily, int]:
        """Return a hashable key that changes with width or typography."""
        return (self.config, self.fonts, self.font_epoch)


def build_typography(
    config: TemplateConfig, *, fonts: FontFamily | None = None, font_epoch: int = 0
) -> TypographyContext:
    """Validate ``config`` and prepare styles for measuring and rendering.

    Args:
        config: Template configuration.
        fonts: Optional pre-registered family; a built-in family is chosen
            from the template's font-family list otherwise.
        font_epoch: Font loading generation.
    Returns:
        TypographyContext ready for the measured height strategy.
    Raises:
        ConfigurationError: The template is unusable.
    """

    validate_config(config)
    family = fonts or builtin_family(config.typography.font_family)
    return TypographyContext(
        config=config,
        fonts=family,
        styles=build_styles(config, family),
        font_epoch=font_epoch,
    )
