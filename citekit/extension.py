"""Wiring of the citation processor and its actions into a host.

``register_extension`` is called once by whoever composes the application;
importing citekit registers nothing.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .actions import (
    CITATION_TARGET,
    REFERENCE_TARGET,
    Action,
    ActionRegistry,
    Target,
    citation_target_at_point,
)
from .config import CitekitConfig
from .document.model import DocumentPort
from .processor import CitationProcessor, ProcessorCache, ReferenceSelector
from .references.bibtex_manager import BibTeXManager
from .references.resources import ResourceOpener
from .styles.catalog import StyleCatalog

logger = logging.getLogger(__name__)

TargetFinder = Callable[[DocumentPort], Optional[Target]]


@dataclass
class CitekitCore:
    """Processor, bibliography cache and settings used by every action."""

    config: CitekitConfig
    processor: CitationProcessor
    cache: ProcessorCache
    opener_options: Dict[str, Callable] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: CitekitConfig,
        selector: Optional[ReferenceSelector] = None,
        **opener_options: Callable,
    ) -> "CitekitCore":
        catalog = StyleCatalog(
            name_format=config.styles_format,
            targets=config.style_targets,
            previews=config.style_previews,
        )
        processor = CitationProcessor(
            catalog, selector=selector, multiple=config.multiple_selection
        )
        return cls(config, processor, ProcessorCache(config.project_root), opener_options)

    def bibliography_files(self, document: Optional[DocumentPort] = None) -> List[Path]:
        """Configured files followed by the document's own bibliography keywords."""
        files = list(self.config.bibliography)
        if document is not None:
            files.extend(f for f in document.bibliography_files() if f not in files)
        if not files:
            files = sorted(self.config.project_root.glob("*.bib"))
        return files

    def bibliography(self, document: Optional[DocumentPort] = None) -> BibTeXManager:
        return self.cache.get_or_create(self.bibliography_files(document))

    def refresh(self, document: Optional[DocumentPort] = None) -> BibTeXManager:
        self.cache.invalidate()
        return self.bibliography(document)

    def opener(self, document: Optional[DocumentPort] = None) -> ResourceOpener:
        return ResourceOpener(
            self.bibliography(document),
            notes_paths=self.config.notes_paths,
            library_paths=self.config.library_paths,
            **self.opener_options,
        )


class ExtensionHost:
    """Registries a host application exposes to extensions."""

    def __init__(self):
        self.processors: Dict[str, CitationProcessor] = {}
        self.target_finders: List[TargetFinder] = []
        self.actions = ActionRegistry()

    def register_processor(self, name: str, processor: CitationProcessor) -> None:
        self.processors[name] = processor

    def add_target_finder(self, finder: TargetFinder) -> None:
        if finder not in self.target_finders:
            self.target_finders.append(finder)

    def register_keymap(self, kind: str, actions: List[Action]) -> None:
        self.actions.register(kind, actions)

    def find_target(self, document: DocumentPort) -> Optional[Target]:
        for finder in self.target_finders:
            target = finder(document)
            if target is not None:
                return target
        return None

    def act(self, target: Target, key: str) -> object:
        return self.actions.act(target, key)


def _resource_actions(core: CitekitCore) -> List[Action]:
    def opening(action: str) -> Callable[[Target], object]:
        return lambda target: core.opener(target.document).run(action, target.keys)

    return [
        Action("o", "open", "Open files, links or notes", opening("dwim")),
        Action("e", "open-entry", "Show bibliography entry", opening("entry")),
        Action("f", "open-files", "Open library files", opening("files")),
        Action("l", "open-links", "Open URL or DOI", opening("links")),
        Action("n", "open-notes", "Open notes", opening("notes")),
        Action(
            "r",
            "refresh",
            "Reload bibliography",
            lambda target: core.refresh(target.document),
        ),
    ]


def _citation_actions(core: CitekitCore) -> List[Action]:
    processor = core.processor
    return [
        Action(
            "C-c C-x DEL",
            "delete-citation",
            "Delete citation or reference",
            lambda target: processor.delete_citation(target.require_document()),
        ),
        Action(
            "C-c C-x k",
            "kill-citation",
            "Kill citation",
            lambda target: processor.kill_citation(target.require_document()),
        ),
        Action(
            "S-<left>",
            "shift-left",
            "Move reference left",
            lambda target: processor.shift_reference_left(target.require_document()),
        ),
        Action(
            "S-<right>",
            "shift-right",
            "Move reference right",
            lambda target: processor.shift_reference_right(target.require_document()),
        ),
        Action(
            "M-p",
            "update-affixes",
            "Update prefix/suffix",
            lambda target: processor.update_affixes(
                target.require_document(),
                target.options.get("prefix", ""),
                target.options.get("suffix", ""),
            ),
        ),
    ]


def register_extension(host: ExtensionHost, core: CitekitCore) -> None:
    """Register the processor, target finder and keymaps with the host."""
    host.register_processor(core.processor.name, core.processor)
    host.add_target_finder(citation_target_at_point)
    host.register_keymap(REFERENCE_TARGET, _resource_actions(core))
    host.register_keymap(CITATION_TARGET, _resource_actions(core) + _citation_actions(core))
    logger.debug(f"Registered {core.processor.name} with {len(host.actions.kinds)} target kinds")
