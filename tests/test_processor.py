"""Tests for the citation processor and its commands."""

import os
from unittest.mock import MagicMock

import pytest

from citekit.document import OrgCiteBuffer
from citekit.exceptions import BoundaryError, SingleReferenceError, TargetNotFoundError
from citekit.processor import CitationProcessor, ProcessorCache
from citekit.styles import StyleCatalog

TEXT = "See [cite:@smith2020;@jones2021;@doe2019] for details."
SMITH, JONES, DOE = 11, 22, 33


@pytest.fixture
def processor():
    return CitationProcessor(StyleCatalog())


class TestSelectKeys:
    """Tests for the insert callback's key selection."""

    def test_multiple_returns_all_keys(self):
        selector = MagicMock()
        selector.select_references.return_value = ["a", "b"]
        processor = CitationProcessor(StyleCatalog(), selector=selector, multiple=True)

        assert processor.select_keys() == ["a", "b"]
        selector.refresh_index.assert_called_once()

    def test_single_returns_first_key(self):
        selector = MagicMock()
        selector.select_references.return_value = ["a", "b"]
        processor = CitationProcessor(StyleCatalog(), selector=selector)

        assert processor.select_keys(multiple=False) == "a"

    def test_nothing_selected(self):
        selector = MagicMock()
        selector.select_references.return_value = []
        processor = CitationProcessor(StyleCatalog(), selector=selector)

        assert processor.select_keys() is None

    def test_requires_selector(self, processor):
        with pytest.raises(RuntimeError):
            processor.select_keys()


class TestInsert:
    """Tests for inserting citations."""

    def test_new_citation_outside_citations(self, processor):
        document = OrgCiteBuffer("Hello world", cursor=5)
        assert processor.insert(document, ["a", "b"]) == ["a", "b"]
        assert document.text == "Hello[cite:@a;@b] world"
        assert document.cursor == len("Hello[cite:@a;@b]")

    def test_new_citation_with_style(self, processor):
        document = OrgCiteBuffer("", cursor=0)
        processor.insert(document, "a", style="text")
        assert document.text == "[cite/text:@a]"

    def test_adds_after_reference_at_cursor(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        added = processor.insert(document, ["new2022", "smith2020"])

        assert added == ["new2022"]
        assert document.text == (
            "See [cite:@smith2020;@jones2021;@new2022;@doe2019] for details."
        )
        assert document.cursor == 40

    def test_appends_when_on_citation_syntax(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=5)
        processor.insert(document, ["new2022"])
        assert document.text == (
            "See [cite:@smith2020;@jones2021;@doe2019;@new2022] for details."
        )

    def test_duplicate_keys_leave_text_alone(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        assert processor.insert(document, ["doe2019"]) == []
        assert document.text == TEXT

    def test_uses_selector_without_keys(self):
        selector = MagicMock()
        selector.select_references.return_value = ["picked"]
        processor = CitationProcessor(StyleCatalog(), selector=selector)
        document = OrgCiteBuffer("x ", cursor=2)

        processor.insert(document)

        assert document.text == "x [cite:@picked]"


class TestShift:
    """Tests for shifting references in a document."""

    def test_shift_left(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        assert processor.shift_reference_left(document) == 0
        assert document.text == "See [cite:@jones2021;@smith2020;@doe2019] for details."
        assert document.parse_context_at_cursor().key == "jones2021"

    def test_shift_right(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        assert processor.shift_reference_right(document) == 2
        assert document.text == "See [cite:@smith2020;@doe2019;@jones2021] for details."
        assert document.cursor == 31
        assert document.parse_context_at_cursor().key == "jones2021"

    def test_shift_keeps_affixes(self, processor):
        document = OrgCiteBuffer("[cite:see @a;@b p. 2]", cursor=11)
        processor.shift_reference_right(document)
        assert document.text == "[cite:@b p. 2;see @a]"
        assert document.parse_context_at_cursor().key == "a"

    def test_boundary_leaves_document_unchanged(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=SMITH)
        with pytest.raises(BoundaryError):
            processor.shift_reference_left(document)
        assert document.text == TEXT
        assert document.cursor == SMITH

    def test_single_reference(self, processor):
        document = OrgCiteBuffer("[cite:@a]", cursor=7)
        with pytest.raises(SingleReferenceError):
            processor.shift_reference_right(document)

    def test_citation_without_reference_target(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=5)
        with pytest.raises(TargetNotFoundError):
            processor.shift_reference_left(document)

    def test_outside_citation(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=0)
        with pytest.raises(TargetNotFoundError):
            processor.shift_reference_left(document)


class TestDeleteAndKill:
    """Tests for removing references and citations."""

    def test_delete_middle_reference(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        assert processor.delete_citation(document) == "@jones2021;"
        assert document.text == "See [cite:@smith2020;@doe2019] for details."

    def test_delete_last_reference(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=DOE)
        processor.delete_citation(document)
        assert document.text == "See [cite:@smith2020;@jones2021] for details."

    def test_delete_only_reference_removes_citation(self, processor):
        document = OrgCiteBuffer("Text [cite:@a] here.", cursor=12)
        assert processor.delete_citation(document) == "[cite:@a]"
        assert document.text == "Text here."

    def test_delete_whole_citation_from_syntax(self, processor):
        document = OrgCiteBuffer("Shown [cite:@a;@b].", cursor=7)
        processor.delete_citation(document)
        assert document.text == "Shown."

    def test_delete_outside_citation(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=0)
        with pytest.raises(TargetNotFoundError):
            processor.delete_citation(document)
        assert document.text == TEXT

    def test_kill_returns_citation_text(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        killed = processor.kill_citation(document)
        assert killed == "[cite:@smith2020;@jones2021;@doe2019]"
        assert document.text == "See for details."


class TestUpdateAffixes:
    """Tests for prefix/suffix editing."""

    def test_sets_prefix_and_suffix(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        processor.update_affixes(document, "see", "p. 4")
        assert document.text == "See [cite:@smith2020;see @jones2021 p. 4;@doe2019] for details."
        assert document.parse_context_at_cursor().key == "jones2021"

    def test_clears_affixes(self, processor):
        document = OrgCiteBuffer("[cite:see @a p. 4;@b]", cursor=11)
        processor.update_affixes(document)
        assert document.text == "[cite:@a;@b]"

    def test_requires_reference(self, processor):
        document = OrgCiteBuffer(TEXT, cursor=5)
        with pytest.raises(TargetNotFoundError):
            processor.update_affixes(document, "see")


class TestFollowAndStyle:
    """Tests for the follow and select-style callbacks."""

    def test_follow_reference(self, processor):
        opener = MagicMock()
        processor.follow(OrgCiteBuffer(TEXT, cursor=JONES), opener)
        opener.run.assert_called_once_with("dwim", ["jones2021"])

    def test_follow_citation(self, processor):
        opener = MagicMock()
        processor.follow(OrgCiteBuffer(TEXT, cursor=5), opener, "links")
        opener.run.assert_called_once_with("links", ["smith2020", "jones2021", "doe2019"])

    def test_follow_outside_citation(self, processor):
        with pytest.raises(TargetNotFoundError):
            processor.follow(OrgCiteBuffer(TEXT, cursor=0), MagicMock())

    def test_select_style_passes_callbacks(self):
        catalog = StyleCatalog(targets=["basic"])
        processor = CitationProcessor(catalog)
        chooser = MagicMock(return_value=" text/caps ")

        assert processor.select_style(chooser) == "text/caps"

        candidates, annotate, group = chooser.call_args[0]
        assert candidates == sorted(candidates)
        assert "/" in candidates
        assert annotate("/").rstrip() == "(de Villiers et al, 2019)"
        assert group("text/caps", False) == "Textual/Narrative"

    def test_select_style_for_targets(self):
        source = MagicMock(return_value={"text": ["caps"]})
        processor = CitationProcessor(StyleCatalog(taxonomy_source=source))
        chooser = MagicMock(return_value="text")

        assert processor.select_style(chooser, targets=["natbib"]) == "text"
        source.assert_called_once_with(["natbib"])
        assert chooser.call_args[0][0] == ["text", "text/caps"]

    def test_select_default_style(self, processor):
        assert processor.select_style(lambda *args: "/") is None

    def test_activate(self, processor):
        callbacks = processor.activate()
        assert set(callbacks) == {"insert", "follow", "select-style"}


class TestProcessorCache:
    """Tests for the bibliography cache."""

    def test_reuses_loaded_bibliography(self, tmp_path):
        bib = tmp_path / "refs.bib"
        bib.write_text("@misc{a, title = {A}}\n")
        factory = MagicMock()
        cache = ProcessorCache(tmp_path, factory)

        first = cache.get_or_create([bib])
        second = cache.get_or_create([bib])

        assert first is second
        factory.assert_called_once_with(tmp_path, [bib])

    def test_reloads_after_file_change(self, tmp_path):
        bib = tmp_path / "refs.bib"
        bib.write_text("@misc{a, title = {A}}\n")
        cache = ProcessorCache(tmp_path)
        assert cache.get_or_create([bib]).get_all_keys() == ["a"]

        bib.write_text("@misc{b, title = {B}}\n")
        stat = bib.stat()
        os.utime(bib, (stat.st_atime, stat.st_mtime + 10))

        assert cache.get_or_create([bib]).get_all_keys() == ["b"]

    def test_reloads_for_other_files(self, tmp_path):
        factory = MagicMock(side_effect=lambda root, files: object())
        cache = ProcessorCache(tmp_path, factory)
        cache.get_or_create([tmp_path / "one.bib"])
        cache.get_or_create([tmp_path / "two.bib"])
        assert factory.call_count == 2

    def test_invalidate(self, tmp_path):
        factory = MagicMock(side_effect=lambda root, files: object())
        cache = ProcessorCache(tmp_path, factory)
        first = cache.get_or_create([])
        cache.invalidate()
        assert cache.get_or_create([]) is not first
