"""Version pipeline — build one xrefmap per Unity release branch.

For every selected release, oldest first:
1. Check out the branch and reset the working tree
2. Run the metadata tool on it
3. Aggregate the metadata into ``<output>/<version>/xrefmap.yml``

A tool failure skips the version; a failed checkout or a malformed metadata
document fails it. Neither stops the run. Setup problems (missing tool,
unreachable repository) raise ``SetupError`` before any version is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from unity_xrefmap.aggregator import build_xrefmap
from unity_xrefmap.config import XRefMapConfig
from unity_xrefmap.errors import CheckoutError, MetadataError
from unity_xrefmap.normalizer import build_rewrite_chain
from unity_xrefmap.site_index import write_index_page
from unity_xrefmap.utils.docfx import MetadataGenerator
from unity_xrefmap.utils.git_ops import VersionSource
from unity_xrefmap.versions import VersionInfo, discover_versions

logger = logging.getLogger(__name__)


class VersionStatus:
    SUCCEEDED = "succeeded"
    FILTERED = "filtered"  # Not among the requested versions
    SKIPPED = "skipped"  # Metadata tool failed
    FAILED = "failed"  # Checkout or metadata aggregation failed


@dataclass
class VersionResult:
    """Outcome of processing (or not processing) one release version."""

    version: str
    branch: str
    status: str
    reason: str = ""
    output_path: Path | None = None
    reference_count: int = 0


@dataclass
class PipelineReport:
    """Every version the run saw, in processing order."""

    results: list[VersionResult] = field(default_factory=list)
    index_path: Path | None = None

    def _with_status(self, status: str) -> list[VersionResult]:
        return [r for r in self.results if r.status == status]

    @property
    def succeeded(self) -> list[VersionResult]:
        return self._with_status(VersionStatus.SUCCEEDED)

    @property
    def skipped(self) -> list[VersionResult]:
        return self._with_status(VersionStatus.SKIPPED)

    @property
    def failed(self) -> list[VersionResult]:
        return self._with_status(VersionStatus.FAILED)

    @property
    def filtered(self) -> list[VersionResult]:
        return self._with_status(VersionStatus.FILTERED)

    def summary(self) -> str:
        return (
            f"{len(self.succeeded)} succeeded, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed, {len(self.filtered)} not selected"
        )


class VersionPipeline:
    """Drives checkout, metadata generation and aggregation for each version."""

    def __init__(
        self,
        config: XRefMapConfig,
        source: VersionSource,
        generator: MetadataGenerator,
    ):
        self.config = config
        self.source = source
        self.generator = generator
        self.chain = build_rewrite_chain(config.root_namespaces)

    def run(self, version_filter: Iterable[str] = ()) -> PipelineReport:
        """Process every discovered version, or only those in ``version_filter``.

        Raises:
            SetupError: If the tool is unavailable or the source cannot be read.
        """
        self.generator.ensure_available()

        versions = discover_versions(self.source.branches())
        selected = set(version_filter)

        missing = sorted(selected - {v.name for v in versions})
        if missing:
            logger.warning("No release branch for requested version(s): %s", ", ".join(missing))

        report = PipelineReport()
        for version in versions:
            if selected and version.name not in selected:
                logger.warning("Skipping '%s'", version.branch)
                report.results.append(
                    VersionResult(
                        version=version.name,
                        branch=version.branch,
                        status=VersionStatus.FILTERED,
                        reason="not requested",
                    )
                )
                continue
            report.results.append(self.process_version(version))

        if report.succeeded:
            report.index_path = write_index_page(self.config.output_path)
            logger.info("Wrote '%s'", report.index_path)

        logger.info("Finished: %s", report.summary())
        return report

    def process_version(self, version: VersionInfo) -> VersionResult:
        """Check out, generate and aggregate a single version."""
        try:
            self.source.materialize(version.branch)
        except CheckoutError as e:
            logger.error("%s", e)
            return VersionResult(
                version=version.name,
                branch=version.branch,
                status=VersionStatus.FAILED,
                reason=str(e),
            )

        if self.config.clean_metadata:
            _clear_metadata(self.config.metadata_path)

        tool_result = self.generator.generate()
        if not tool_result.succeeded:
            logger.warning("Metadata tool %s for %s, skipping", tool_result.describe(), version.name)
            return VersionResult(
                version=version.name,
                branch=version.branch,
                status=VersionStatus.SKIPPED,
                reason=f"metadata tool {tool_result.describe()}",
            )

        logger.info("Generating XRef map for Unity %s", version.name)
        output_path = self.config.output_file(version.name)
        try:
            entries = build_xrefmap(
                self.config.metadata_path,
                self.config.base_url(version.name),
                output_path,
                self.chain,
            )
        except MetadataError as e:
            logger.error("Cannot aggregate metadata for %s: %s", version.name, e)
            return VersionResult(
                version=version.name,
                branch=version.branch,
                status=VersionStatus.FAILED,
                reason=str(e),
            )

        return VersionResult(
            version=version.name,
            branch=version.branch,
            status=VersionStatus.SUCCEEDED,
            output_path=output_path,
            reference_count=len(entries),
        )


def _clear_metadata(metadata_path: Path) -> None:
    """Delete metadata files left by the previous version's run."""
    path = Path(metadata_path)
    if not path.is_dir():
        return
    for stale in path.glob("*.yml"):
        stale.unlink()
