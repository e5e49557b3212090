"""Tests for greedy page assignment."""

import pytest
from conftest import make_role

from resume_pages.models import ResumeHeader
from resume_pages.pdf.pdf_pagination import _split_unit, _Unit, assign_to_pages
from resume_pages.pdf.pdf_types import (
    ExperienceEntryBlock,
    HeaderBlock,
    PageSet,
    SectionTitleBlock,
    SummaryBlock,
    merge_split_parts,
)
from resume_pages.pdf.pdf_validation import validate

HEADER = HeaderBlock(ResumeHeader(name="Jane Doe"))
SUMMARY = SummaryBlock("Engineer.")


def _roles(count: int) -> list[ExperienceEntryBlock]:
    return [
        ExperienceEntryBlock(entries=(make_role(i),), key=f"experience:{i}") for i in range(count)
    ]


def _keys(pages) -> list[list[str]]:
    return [[block.key for block in page.blocks] for page in pages]


def test_scenario_a_moves_entries_that_do_not_fit() -> None:
    blocks = [HEADER, SUMMARY, *_roles(3)]

    pages = assign_to_pages(blocks, [80, 60, 300, 300, 300], 700)

    assert _keys(pages) == [
        ["header", "summary", "experience:0"],
        ["experience:1", "experience:2"],
    ]
    assert pages[0].consumed == 440
    assert pages[1].consumed == 600


def test_scenario_c_oversized_entry_is_placed_alone() -> None:
    blocks = [HEADER, *_roles(1)]

    pages = assign_to_pages(blocks, [80, 1200], 971)
    report = validate(pages)

    assert _keys(pages) == [["header"], ["experience:0"]]
    assert report.errors == ["Page 2: content exceeds capacity by 229px"]
    assert not report.valid


def test_scenario_d_warns_above_soft_page_limit() -> None:
    blocks = _roles(4)

    pages = assign_to_pages(blocks, [600] * 4, 971)
    report = validate(pages)

    assert len(pages) == 4
    assert "Document spans 4 pages; consider condensing." in report.warnings


def test_section_title_travels_with_next_block() -> None:
    title = SectionTitleBlock("EXPERIENCE", "experience", key="title:experience")
    blocks = [HEADER, title, *_roles(1)]

    pages = assign_to_pages(blocks, [900, 40, 100], 971)

    assert _keys(pages) == [["header"], ["title:experience", "experience:0"]]


def test_title_at_document_end_stays_where_it_fits() -> None:
    title = SectionTitleBlock("EDUCATION", "education", key="title:education")

    pages = assign_to_pages([HEADER, title], [100, 40], 971)

    assert _keys(pages) == [["header", "title:education"]]


def test_split_eligible_block_is_cut_between_roles() -> None:
    block = ExperienceEntryBlock(entries=tuple(make_role(i) for i in range(3)), key="experience")

    pages = assign_to_pages(
        [HEADER, block], [500, 900], 971, entry_heights={1: [300, 300, 300]}
    )

    first, second = pages[0].blocks[-1], pages[1].blocks[0]
    assert len(first.entries) == 1 and len(second.entries) == 2
    assert (first.part, first.parts) == (0, 2)
    assert (second.part, second.parts) == (1, 2)
    assert pages[0].consumed == 800
    assert pages[1].consumed == 600
    assert merge_split_parts(PageSet(pages, 971).blocks()) == [HEADER, block]


def test_split_keeps_section_title_with_first_part() -> None:
    title = SectionTitleBlock("EXPERIENCE", "experience", key="title:experience")
    block = ExperienceEntryBlock(entries=tuple(make_role(i) for i in range(3)), key="experience")

    pages = assign_to_pages(
        [HEADER, title, block], [500, 40, 900], 971, entry_heights={2: [300, 300, 300]}
    )

    assert _keys(pages) == [["header", "title:experience", "experience"], ["experience"]]
    assert [len(b.entries) for b in (pages[0].blocks[-1], pages[1].blocks[0])] == [1, 2]


def test_remainder_is_split_again_when_still_too_tall() -> None:
    block = ExperienceEntryBlock(entries=tuple(make_role(i) for i in range(5)), key="experience")

    pages = assign_to_pages([block], [2000], 971, entry_heights={0: [400] * 5})

    assert [len(page.blocks[0].entries) for page in pages] == [2, 2, 1]
    assert [page.blocks[0].part for page in pages] == [0, 1, 2]
    assert all(page.blocks[0].parts == 3 for page in pages)
    assert merge_split_parts(PageSet(pages, 971).blocks()) == [block]


def test_oversized_first_role_is_split_off_alone() -> None:
    block = ExperienceEntryBlock(entries=(make_role(1), make_role(2)), key="experience")

    pages = assign_to_pages([block], [1300], 971, entry_heights={0: [1200, 100]})
    report = validate(pages)

    assert [page.consumed for page in pages] == [1200, 100]
    assert [page.blocks[0].entries for page in pages] == [block.entries[:1], block.entries[1:]]
    assert report.errors == ["Page 1: content exceeds capacity by 229px"]


def test_oversized_role_after_others_moves_to_its_own_page() -> None:
    block = ExperienceEntryBlock(entries=tuple(make_role(i) for i in range(3)), key="experience")

    pages = assign_to_pages(
        [HEADER, block], [80, 1500], 971, entry_heights={1: [200, 1200, 100]}
    )

    assert [page.consumed for page in pages] == [280, 1200, 100]
    assert [len(page.blocks[-1].entries) for page in pages] == [1, 1, 1]
    assert merge_split_parts(PageSet(pages, 971).blocks()) == [HEADER, block]


def test_split_parts_cover_every_role_exactly_once() -> None:
    roles = tuple(make_role(i) for i in range(7))
    block = ExperienceEntryBlock(entries=roles, key="experience")
    heights = [350, 500, 120, 640, 300, 280, 450]

    pages = assign_to_pages(
        [HEADER, SUMMARY, block], [80, 60, sum(heights)], 971, entry_heights={2: heights}
    )

    parts = [b for b in PageSet(pages, 971).blocks() if isinstance(b, ExperienceEntryBlock)]
    assert len(parts) >= 3
    assert [b.part for b in parts] == list(range(len(parts)))
    assert all(b.parts == len(parts) for b in parts)
    assert [role for part in parts for role in part.entries] == list(roles)
    assert all(page.consumed <= 971 for page in pages)
    assert merge_split_parts(PageSet(pages, 971).blocks()) == [HEADER, SUMMARY, block]


def test_block_without_entry_heights_is_atomic() -> None:
    block = ExperienceEntryBlock(entries=tuple(make_role(i) for i in range(3)), key="experience")

    pages = assign_to_pages([HEADER, block], [500, 900], 971)

    assert _keys(pages) == [["header"], ["experience"]]


def test_capacity_bound_order_and_idempotence() -> None:
    blocks = [HEADER, SUMMARY, *_roles(12)]
    heights = [80, 60] + [120 + (i * 37) % 200 for i in range(12)]

    first = assign_to_pages(blocks, heights, 971)
    second = assign_to_pages(blocks, heights, 971)

    assert _keys(first) == _keys(second)
    assert [block for page in first for block in page.blocks] == blocks
    for page in first:
        assert page.consumed <= 971
        assert not page.is_empty


def test_no_title_ends_a_page_unless_it_ends_the_document() -> None:
    blocks = []
    heights = []
    for section in range(6):
        blocks.append(SectionTitleBlock(f"S{section}", f"s{section}", key=f"title:{section}"))
        heights.append(40)
        blocks.extend(
            ExperienceEntryBlock(entries=(make_role(i),), key=f"e:{section}:{i}") for i in range(3)
        )
        heights.extend([110, 95, 130])

    pages = assign_to_pages(blocks, heights, 500)

    for page in pages[:-1]:
        assert not isinstance(page.blocks[-1], SectionTitleBlock)


def test_empty_input_yields_no_pages() -> None:
    assert assign_to_pages([], [], 971) == []


@pytest.mark.parametrize(
    ("heights", "capacity"),
    [([80, 60], 971), ([80], 0), ([-1], 971)],
)
def test_invalid_input_is_rejected(heights, capacity) -> None:
    with pytest.raises(ValueError):
        assign_to_pages([HEADER], heights, capacity)


def test_entry_height_count_must_match_entries() -> None:
    block = ExperienceEntryBlock(entries=(make_role(1), make_role(2)), key="experience")

    with pytest.raises(ValueError):
        assign_to_pages([block], [200], 971, entry_heights={0: [100]})


def test_only_experience_blocks_can_be_split() -> None:
    unit = _Unit(block=SUMMARY, height=400, entry_heights=[200, 200])

    with pytest.raises(TypeError):
        _split_unit(unit=unit, budget=300)
