"""
Pipeline driver.

Orchestrates change resolution, detection, prompting, the backend call,
sanitizing and application over the change set, one file at a time,
and reduces the per-file results into a RunOutcome.
"""

import logging
import os
from enum import Enum
from typing import List, Optional, Sequence

from securityagent.backends.base import GenerativeBackend
from securityagent.config import AgentConfig
from securityagent.core.changes import ChangeSetResolver, filter_paths
from securityagent.core.detector import VulnerabilityDetector
from securityagent.core.findings import FileOutcome, FileResult, RunOutcome, sort_categories
from securityagent.exceptions import BackendError
from securityagent.remediation.applier import RemediationApplier
from securityagent.remediation.prompts import RemediationPromptBuilder
from securityagent.remediation.sanitizer import CompletionSanitizer

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """States of a pipeline run."""
    INIT = "init"
    RESOLVING_CHANGES = "resolving_changes"
    PROCESSING = "processing"
    DONE_CLEAN = "done_clean"
    DONE_DIRTY = "done_dirty"


class PipelineDriver:
    """
    Runs the remediation pipeline over a change set.

    Files are processed strictly sequentially. An error in one file is
    recorded as that file's outcome and never stops the remaining files.
    """

    def __init__(
        self,
        config: AgentConfig,
        backend: GenerativeBackend,
        resolver: Optional[ChangeSetResolver] = None,
        detector: Optional[VulnerabilityDetector] = None,
        prompt_builder: Optional[RemediationPromptBuilder] = None,
        sanitizer: Optional[CompletionSanitizer] = None,
        applier: Optional[RemediationApplier] = None,
    ):
        self.config = config
        self.backend = backend
        self.root = config.root
        self.resolver = resolver or ChangeSetResolver(
            root=config.root,
            base_ref=config.base_ref,
            remote=config.remote,
            extensions=config.extensions,
            exclude_paths=config.exclude_paths,
        )
        self.detector = detector or VulnerabilityDetector(config.enabled_categories)
        self.prompt_builder = prompt_builder or RemediationPromptBuilder()
        self.sanitizer = sanitizer or CompletionSanitizer()
        self.applier = applier or RemediationApplier(dry_run=config.dry_run)
        self.state = PipelineState.INIT

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, paths: Optional[Sequence[str]] = None) -> RunOutcome:
        """
        Run the pipeline.

        Args:
            paths: Explicit candidate paths relative to the root. When None,
                the change set is resolved from git.

        Returns:
            The aggregate RunOutcome.
        """
        self._transition(PipelineState.RESOLVING_CHANGES)

        if paths is None:
            change_set = self.resolver.resolve()
        else:
            change_set = filter_paths(paths, self.config.extensions, self.config.exclude_paths)

        if not change_set:
            logger.info("No changed source files found; nothing to do.")
            self._transition(PipelineState.DONE_CLEAN)
            return RunOutcome()

        self._transition(PipelineState.PROCESSING)
        outcomes: List[FileOutcome] = [self.process_file(path) for path in change_set]
        outcome = RunOutcome.from_outcomes(outcomes)

        if outcome.any_change_applied:
            self._transition(PipelineState.DONE_DIRTY)
            logger.info("🔁 Remediation applied to %d file(s); changes need re-validation.", outcome.fixed_count)
        else:
            self._transition(PipelineState.DONE_CLEAN)
            logger.info("✅ No remediation applied.")

        if outcome.error_count:
            logger.warning("%d file(s) could not be processed.", outcome.error_count)

        return outcome

    def process_file(self, path: str) -> FileOutcome:
        """Process one file, classifying any unexpected failure as an error."""
        try:
            return self._process_file(path)
        except Exception as e:
            logger.error("❌ %s: unexpected %s: %s", path, type(e).__name__, e)
            logger.debug("Traceback for %s", path, exc_info=True)
            return FileOutcome(path, FileResult.ERROR, message=f"{type(e).__name__}: {e}")

    def _process_file(self, path: str) -> FileOutcome:
        full_path = os.path.join(self.root, path)

        try:
            with open(full_path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error("❌ %s: could not read file: %s", path, e)
            return FileOutcome(path, FileResult.ERROR, message=f"read failed: {e}")

        verdict = self.detector.detect(content, path)
        if not verdict.is_flagged:
            logger.info("· %s: no vulnerability patterns; skipped", path)
            return FileOutcome(path, FileResult.SKIPPED)

        labels = ", ".join(c.label for c in sort_categories(verdict.categories))
        logger.info("🚨 Vulnerability detected in %s: %s", path, labels)

        prompt = self.prompt_builder.build(path, content, verdict.categories)

        try:
            completion = self.backend.submit(prompt.text)
        except BackendError as e:
            logger.error("❌ %s: backend call failed: %s", path, e)
            return FileOutcome(path, FileResult.ERROR, verdict.categories, f"backend error: {e}")

        if completion is None:
            logger.warning("⚠ %s: AI returned no result; file left unchanged", path)
            return FileOutcome(path, FileResult.FLAGGED_UNFIXED, verdict.categories, "no result from backend")

        artifact = self.sanitizer.sanitize(completion)
        return self.applier.apply(full_path, content, artifact, verdict.categories, display_path=path)
