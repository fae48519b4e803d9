"""Tests for context actions, extension registration and resource opening."""

from unittest.mock import MagicMock

import pytest

from citekit.actions import (
    CITATION_TARGET,
    REFERENCE_TARGET,
    Action,
    ActionRegistry,
    Target,
    citation_target_at_point,
    reference_target,
)
from citekit.config import CitekitConfig
from citekit.document import OrgCiteBuffer
from citekit.exceptions import TargetNotFoundError, UnknownActionError
from citekit.extension import CitekitCore, ExtensionHost, register_extension
from citekit.references import BibTeXManager, ResourceOpener

TEXT = "See [cite:@smith2020;@jones2021] for details."
JONES = 22

BIB = """
@article{smith2020,
  author = {Smith, John},
  title = {A Paper},
  year = {2020},
  url = {https://example.org/smith}
}

@article{jones2021,
  author = {Jones, Jane},
  title = {Another Paper},
  year = {2021},
  doi = {10.1000/jones}
}
"""


@pytest.fixture
def bib_file(tmp_path):
    path = tmp_path / "refs.bib"
    path.write_text(BIB)
    return path


@pytest.fixture
def core(tmp_path, bib_file):
    config = CitekitConfig(project_root=tmp_path, bibliography=[bib_file])
    return CitekitCore.from_config(config, open_url=MagicMock(), show_entry=MagicMock())


@pytest.fixture
def host(core):
    host = ExtensionHost()
    register_extension(host, core)
    return host


class TestTargets:
    """Tests for target finders."""

    def test_reference_at_point(self):
        target = citation_target_at_point(OrgCiteBuffer(TEXT, cursor=JONES))
        assert target.kind == CITATION_TARGET
        assert target.keys == ["jones2021"]

    def test_citation_at_point(self):
        target = citation_target_at_point(OrgCiteBuffer(TEXT, cursor=5))
        assert target.keys == ["smith2020", "jones2021"]

    def test_nothing_at_point(self):
        assert citation_target_at_point(OrgCiteBuffer(TEXT, cursor=0)) is None

    def test_reference_candidate(self):
        target = reference_target(" @smith2020 ")
        assert target.kind == REFERENCE_TARGET
        assert target.keys == ["smith2020"]
        with pytest.raises(TargetNotFoundError):
            target.require_document()


class TestActionRegistry:
    """Tests for keymaps."""

    def test_register_and_act(self):
        registry = ActionRegistry()
        handler = MagicMock(return_value="done")
        registry.register("kind", [Action("x", "do-x", "Do x", handler)])

        target = Target("kind", ["a"])
        assert registry.act(target, "x") == "done"
        handler.assert_called_once_with(target)

    def test_unknown_binding(self):
        registry = ActionRegistry()
        registry.register("kind", [])
        with pytest.raises(UnknownActionError, match="'z'"):
            registry.lookup("kind", "z")

    def test_keymap_is_a_copy(self):
        registry = ActionRegistry()
        registry.register("kind", [Action("x", "do-x", "Do x", MagicMock())])
        registry.keymap("kind").clear()
        assert list(registry.keymap("kind")) == ["x"]


class TestRegisterExtension:
    """Tests for wiring into a host."""

    def test_registrations(self, host, core):
        assert host.processors == {"citekit": core.processor}
        assert host.target_finders == [citation_target_at_point]
        assert host.actions.kinds == [REFERENCE_TARGET, CITATION_TARGET]

    def test_keymaps(self, host):
        reference_keys = set(host.actions.keymap(REFERENCE_TARGET))
        citation_keys = set(host.actions.keymap(CITATION_TARGET))

        assert reference_keys == {"o", "e", "f", "l", "n", "r"}
        assert citation_keys == reference_keys | {
            "C-c C-x DEL",
            "C-c C-x k",
            "S-<left>",
            "S-<right>",
            "M-p",
        }

    def test_registering_twice_keeps_one_finder(self, host, core):
        register_extension(host, core)
        assert len(host.target_finders) == 1

    def test_shift_through_host(self, host):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        target = host.find_target(document)

        host.act(target, "S-<left>")

        assert document.text == "See [cite:@jones2021;@smith2020] for details."

    def test_update_affixes_through_host(self, host):
        document = OrgCiteBuffer(TEXT, cursor=JONES)
        target = host.find_target(document)
        target.options.update(prefix="see", suffix="ch. 2")

        host.act(target, "M-p")

        assert "see @jones2021 ch. 2" in document.text

    def test_open_links_for_reference(self, host, core):
        host.act(reference_target("jones2021"), "l")
        core.opener_options["open_url"].assert_called_once_with(
            "https://doi.org/10.1000/jones"
        )

    def test_open_entry(self, host, core):
        host.act(reference_target("smith2020"), "e")
        (entry,), _ = core.opener_options["show_entry"].call_args
        assert entry.title == "A Paper"

    def test_refresh(self, host, core, bib_file):
        first = core.bibliography()
        bib_file.write_text("@misc{other, title = {Other}}\n")
        refreshed = host.act(reference_target("smith2020"), "r")
        assert refreshed is not first
        assert refreshed.get_all_keys() == ["other"]

    def test_editing_actions_not_bound_for_references(self, host):
        with pytest.raises(UnknownActionError):
            host.act(reference_target("smith2020"), "S-<left>")

    def test_document_bibliography_keywords(self, tmp_path, bib_file):
        config = CitekitConfig(project_root=tmp_path)
        core = CitekitCore.from_config(config)
        document = OrgCiteBuffer("#+bibliography: refs.bib\n", path=tmp_path / "paper.org")

        assert core.bibliography_files(document) == [bib_file]
        assert core.bibliography(document).get_entry("smith2020") is not None


class TestResourceOpener:
    """Tests for resource lookup."""

    @pytest.fixture
    def bibliography(self, tmp_path, bib_file):
        manager = BibTeXManager(tmp_path, [bib_file])
        manager.load_bibliography()
        return manager

    def test_notes(self, tmp_path, bibliography):
        notes = tmp_path / "notes"
        notes.mkdir()
        (notes / "smith2020.org").write_text("* Notes")
        open_path = MagicMock()
        opener = ResourceOpener(bibliography, notes_paths=[notes], open_path=open_path)

        assert opener.run("notes", ["smith2020"]) == [notes / "smith2020.org"]
        open_path.assert_called_once_with(notes / "smith2020.org")

    def test_library_files(self, tmp_path, bibliography):
        library = tmp_path / "pdfs"
        library.mkdir()
        (library / "jones2021.pdf").write_bytes(b"%PDF")
        opener = ResourceOpener(bibliography, library_paths=[library], open_path=MagicMock())

        assert opener.open_files(["jones2021"]) == [library / "jones2021.pdf"]

    def test_dwim_prefers_files_then_links(self, tmp_path, bibliography):
        library = tmp_path / "pdfs"
        library.mkdir()
        (library / "jones2021.pdf").write_bytes(b"%PDF")
        open_url = MagicMock()
        opener = ResourceOpener(
            bibliography, library_paths=[library], open_url=open_url, open_path=MagicMock()
        )

        opened = opener.run("dwim", ["jones2021", "smith2020"])

        assert opened == [library / "jones2021.pdf", "https://example.org/smith"]
        open_url.assert_called_once_with("https://example.org/smith")

    def test_unknown_key_opens_nothing(self, bibliography):
        opener = ResourceOpener(bibliography, open_url=MagicMock())
        assert opener.run("links", ["nobody"]) == []

    def test_no_keys(self, bibliography):
        with pytest.raises(TargetNotFoundError):
            ResourceOpener(bibliography).run("dwim", [])

    def test_unknown_action(self, bibliography):
        with pytest.raises(ValueError):
            ResourceOpener(bibliography).run("print", ["smith2020"])
