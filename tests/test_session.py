"""Tests for coalesced, snapshot-ordered recomputation."""

from dataclasses import replace

import pytest
from conftest import make_role

import resume_pages.session as session_module
from resume_pages.errors import ConfigurationError
from resume_pages.pdf.pdf_settings import PageGeometry, PagePadding, TemplateConfig
from resume_pages.session import LayoutSession


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session(config, sample_document, clock) -> LayoutSession:
    return LayoutSession(config, document=sample_document, debounce=0.15, clock=clock)


def test_nothing_runs_inside_debounce_window(session) -> None:
    assert session.pending
    assert session.poll(0.1) is None
    assert session.committed is None


def test_two_step_commit_provisional_then_measured(session) -> None:
    provisional = session.poll(0.2)

    assert provisional is not None and provisional.provisional
    assert session.exportable is None

    measured = session.poll(0.21)

    assert measured is not None and not measured.provisional
    assert session.exportable is measured
    assert measured.version == session.version
    assert not session.pending
    assert session.report is not None and session.report.valid


def test_rapid_edits_collapse_into_one_recomputation(session, sample_document, clock, monkeypatch) -> None:
    calls = []
    real_decompose = session_module.decompose

    def counting(document, config):
        calls.append(document)
        return real_decompose(document, config)

    monkeypatch.setattr(session_module, "decompose", counting)
    for step in range(5):
        clock.now = step * 0.05
        session.set_document(replace(sample_document, summary=f"Draft {step}"))

    assert session.poll(0.3) is None
    session.poll(0.4)
    session.poll(0.41)

    assert len(calls) == 1
    assert calls[0].summary == "Draft 4"
    assert session.exportable.version == session.version


def test_superseded_pass_is_discarded(session, sample_document, clock) -> None:
    session.poll(0.2)
    started = session.version
    clock.now = 0.25
    session.set_document(replace(sample_document, summary="Newer text"))

    session.poll(0.26)

    assert session.exportable is None
    assert session.committed.version == started
    final = session.flush()
    assert final.version == session.version
    assert session.exportable is final


def test_page_count_listeners(session, sample_document) -> None:
    counts = []
    unsubscribe = session.subscribe(counts.append)

    session.flush()
    assert counts == [1]

    longer = replace(sample_document, experience=tuple(make_role(i, bullets=6) for i in range(12)))
    session.set_document(longer)
    session.flush()

    assert counts[-1] == session.committed.page_count > 1
    assert all(a != b for a, b in zip(counts, counts[1:]))
    unsubscribe()
    session.set_document(sample_document)
    session.flush()
    assert counts[-1] > 1


def test_provisional_commits_do_not_notify(session) -> None:
    counts = []
    session.subscribe(counts.append)

    provisional = session.poll(0.2)

    assert provisional.provisional
    assert counts == []
    session.poll(0.21)
    assert counts == [session.exportable.page_count]


def test_fonts_changed_drops_cached_heights(session) -> None:
    session.flush()
    assert len(session.cache) > 0

    session.fonts_changed()

    assert len(session.cache) == 0
    assert session.typography.font_epoch == 1
    assert session.pending
    assert not session.flush().provisional


def test_unchanged_blocks_reuse_cached_heights(session, sample_document) -> None:
    session.flush()
    hits = session.cache.hits

    session.set_document(replace(sample_document, summary="Only the summary changed."))
    session.flush()

    assert session.cache.hits > hits


def test_invalid_config_leaves_session_untouched(session, config) -> None:
    session.flush()
    version = session.version
    broken = TemplateConfig(page=PageGeometry(padding=PagePadding(top=600, bottom=600)))

    with pytest.raises(ConfigurationError):
        session.set_config(broken)

    assert session.config == config
    assert session.version == version
    assert not session.pending


def test_set_config_repaginates(session) -> None:
    session.flush()
    minimal = TemplateConfig(id="narrow", page=PageGeometry(padding=PagePadding(top=300, bottom=300)))

    session.set_config(minimal)
    page_set = session.flush()

    assert page_set.capacity == pytest.approx(523)
    assert session.config is minimal


def test_export_pages_flushes_and_renders(session) -> None:
    pages = session.export_pages()

    assert len(pages) == session.exportable.page_count
    assert not session.pending
