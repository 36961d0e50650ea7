import logging
import threading
from functools import cached_property
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from loaders.js_project import discover_js_project
from models.config import Config, ModuleSystemConfig
from models.graph import ModuleGraph
from models.metrics import Cycle, EntropyReport
from models.rules import Violation
from services.graph_builder import GraphBuilder
from services.languages import JavaScriptLanguage, Language, infer_language
from services.metrics import entropy, find_cycles
from services.rule_checker import RuleChecker

logger = logging.getLogger(__name__)


class AnalysisPipeline(BaseModel):
    """Wire language inference, graph building, metrics and rule checking.

    The graph is built once on first access and shared by every report.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    entry_files: list[Path]
    config: Config = Field(default_factory=Config)
    stop_event: threading.Event = Field(default_factory=threading.Event)

    @cached_property
    def root(self) -> Path:
        return (self.config.root or Path.cwd()).resolve()

    @cached_property
    def language(self) -> Language:
        return infer_language(self.entry_files)

    @cached_property
    def module_system(self) -> ModuleSystemConfig:
        if isinstance(self.language, JavaScriptLanguage):
            return discover_js_project(self.root, self.config.module_system)
        return self.config.module_system

    @cached_property
    def graph(self) -> ModuleGraph:
        logger.info(
            "Building %s module graph from %d entry files under %s",
            self.language.name,
            len(self.entry_files),
            self.root,
        )
        builder = GraphBuilder(
            root=self.root,
            language=self.language,
            config=self.module_system,
            workers=self.config.workers,
            stop_event=self.stop_event,
        )
        return builder.build(self.entry_files)

    def cycles(self) -> list[Cycle]:
        return find_cycles(self.graph)

    def entropy(self) -> EntropyReport:
        return entropy(self.graph, self.config.entropy.weighting)

    def check(self) -> list[Violation]:
        return RuleChecker(config=self.config.check).check(self.graph)
