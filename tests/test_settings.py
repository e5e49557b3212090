"""Tests for template configuration, validation and styles."""

import pytest

from resume_pages.errors import ConfigurationError
from resume_pages.pdf.pdf_settings import (
    HELVETICA,
    TIMES,
    FontSizes,
    PageGeometry,
    TemplateConfig,
    TemplateRules,
    Typography,
    available_template_ids,
    build_typography,
    builtin_family,
    config_problems,
    get_template_config,
    register_font_family,
)

VALID_MAPPING = {
    "id": "custom",
    "name": "Custom",
    "page": {
        "width": 794,
        "height": 1123,
        "padding": {"top": 40, "right": 40, "bottom": 40, "left": 40},
        "margins": {"section": 14, "entry": 10},
    },
    "typography": {
        "fontFamily": "Georgia, serif",
        "sizes": {"name": 24, "sectionTitle": 14, "jobTitle": 12, "body": 11, "caption": 10},
        "lineHeights": {"tight": 1.25, "normal": 1.5, "relaxed": 1.7},
    },
    "rules": {"maxBulletsPerRole": 3, "sectionTitleCase": "capitalize"},
}


def test_default_geometry() -> None:
    config = TemplateConfig()

    assert config.capacity == pytest.approx(971)
    assert config.content_width == pytest.approx(643)


@pytest.mark.parametrize("template_id", available_template_ids())
def test_builtin_templates_are_usable(template_id) -> None:
    config = get_template_config(template_id)

    assert config_problems(config) == []
    assert config.capacity > 0
    typography = build_typography(config)
    assert set(typography.styles) >= {"name", "section_title", "bullet", "skills"}


def test_unknown_template_id() -> None:
    with pytest.raises(ConfigurationError, match="unknown template"):
        get_template_config("fancy")


def test_from_mapping_accepts_camel_case() -> None:
    config = TemplateConfig.from_mapping(VALID_MAPPING)

    assert config.capacity == pytest.approx(1043)
    assert config.typography.sizes.section_title == 14
    assert config.typography.line_heights.relaxed == pytest.approx(1.7)
    assert config.rules.max_bullets_per_role == 3
    assert config.rules.section_title_case == "capitalize"
    assert config.page.margins.entry == 10


def test_from_mapping_requires_page_fields() -> None:
    data = {"page": {"width": 794, "padding": {"top": 1, "right": 1, "bottom": 1, "left": 1}}}

    with pytest.raises(ConfigurationError, match="page.height"):
        TemplateConfig.from_mapping(data)


@pytest.mark.parametrize(
    "config",
    [
        TemplateConfig(page=PageGeometry(width=800)),
        TemplateConfig(typography=Typography(sizes=FontSizes(body=0))),
        TemplateConfig(rules=TemplateRules(max_bullets_per_role=0)),
        TemplateConfig(rules=TemplateRules(section_title_case="shouty")),
    ],
)
def test_invalid_configs_fail_fast(config) -> None:
    assert config_problems(config)
    with pytest.raises(ConfigurationError):
        build_typography(config)


def test_configuration_error_is_a_value_error() -> None:
    error = ConfigurationError(["a", "b"])

    assert isinstance(error, ValueError)
    assert error.problems == ["a", "b"]
    assert str(error) == "a; b"


def test_builtin_family_mapping() -> None:
    assert builtin_family("Georgia, serif") == TIMES
    assert builtin_family("Inter, Arial, Helvetica, sans-serif") == HELVETICA


def test_register_font_family_without_file(tmp_path) -> None:
    assert register_font_family(name="Missing", regular_path=tmp_path / "missing.ttf") is None


def test_font_epoch_changes_fingerprint(config) -> None:
    assert build_typography(config).fingerprint != build_typography(config, font_epoch=1).fingerprint
