# src/packer/controllers/pack_controller.py
from __future__ import annotations

import logging
import os
from typing import Callable, Iterable, List, Optional

from tqdm.auto import tqdm

from packer.model import (
    BatchFailure,
    BatchReport,
    PackError,
    PackRequest,
    PackResult,
    PackStatus,
    PackWarning,
    SearchContext,
)
from packer.services.document_service import DOCTYPE, DocumentService
from packer.services.resource_inline_service import ResourceInlineService
from packer.services.resource_resolver_service import ResourceResolverService
from packer.services.tree_walker_service import TreeWalkerService

logger = logging.getLogger(__name__)


class PackController:
    """
    Packs a single HTML file: parse -> walk -> (skip | write).
    Every call builds its own tree and search context; nothing is kept between calls.
    """

    def __init__(
            self,
            document: Optional[DocumentService] = None,
            walker: Optional[TreeWalkerService] = None,
    ) -> None:
        self.document = document or DocumentService()
        self.walker = walker or TreeWalkerService(ResourceResolverService(), ResourceInlineService())

    @staticmethod
    def build_context(request: PackRequest) -> SearchContext:
        """The input's parent directory comes first; '' means the current directory."""
        return SearchContext(
            base_directory=os.path.dirname(request.input_path),
            search_paths=list(request.search_paths),
        )

    @staticmethod
    def destination_for(request: PackRequest) -> str:
        return os.path.join(request.output_dir, os.path.basename(request.input_path))

    def pack(self, request: PackRequest) -> PackResult:
        """
        Runs the full lifecycle for one input file.

        Raises:
            PackError: If the input cannot be read or the destination cannot be written.
        """
        # --- Idle -> Parsed ---
        try:
            with open(request.input_path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise PackError(f"I/O Error: {e}", path=request.input_path) from e

        soup = self.document.parse(raw)

        # --- Parsed -> Walked ---
        outcome = self.walker.walk(soup, self.build_context(request))
        destination = self.destination_for(request)

        # --- Walked -> Skipped ---
        if not request.overwrite and os.path.exists(destination):
            warning = PackWarning.destination_exists(destination)
            logger.info(warning.message)
            return PackResult(
                input_path=request.input_path,
                destination=destination,
                status=PackStatus.SKIPPED,
                warnings=outcome.warnings + [warning],
                inlined_count=outcome.inlined_count,
            )

        # --- Walked -> Written ---
        payload = DOCTYPE + self.document.serialize(soup)
        try:
            with open(destination, "wb") as f:
                f.write(payload)
        except OSError as e:
            raise PackError(f"I/O Error: {e}", path=destination) from e

        logger.info(
            "Wrote %s (%d image(s) inlined, %d warning(s)).",
            destination, outcome.inlined_count, len(outcome.warnings)
        )
        return PackResult(
            input_path=request.input_path,
            destination=destination,
            status=PackStatus.WRITTEN,
            warnings=outcome.warnings,
            inlined_count=outcome.inlined_count,
        )


class BatchPackController:
    """
    Packs several inputs strictly one after the other, with a fresh PackController per file.
    """

    def __init__(self, controller_factory: Callable[[], PackController] = PackController) -> None:
        self.controller_factory = controller_factory

    def run(
            self,
            inputs: Iterable[str],
            output_dir: str,
            search_paths: Optional[List[str]] = None,
            overwrite: bool = False,
            *,
            stop_on_error: bool = True,
            show_progress: bool = False,
            on_start: Optional[Callable[[str], None]] = None,
            on_result: Optional[Callable[[PackResult], None]] = None,
    ) -> BatchReport:
        """
        Args:
            stop_on_error (bool): Re-raise the first PackError (later inputs are not touched).
                                  When False, failures are collected and the batch continues.
            on_start / on_result: Optional hooks, e.g. for printing progress lines.

        Returns:
            BatchReport: Results per written/skipped file plus any collected failures.
        """
        report = BatchReport()
        input_list = list(inputs)
        iterator = input_list if not show_progress else tqdm(input_list, desc="Packing", unit="file", leave=False)

        for input_path in iterator:
            if on_start:
                on_start(input_path)
            request = PackRequest(
                input_path=input_path,
                output_dir=output_dir,
                overwrite=overwrite,
                search_paths=list(search_paths or []),
            )
            try:
                result = self.controller_factory().pack(request)
            except PackError as e:
                if stop_on_error:
                    raise
                logger.error("Packing %s failed: %s", input_path, e)
                report.failures.append(BatchFailure(input_path=input_path, message=str(e)))
                continue

            report.results.append(result)
            if on_result:
                on_result(result)

        return report
