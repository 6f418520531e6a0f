"""Parallel style-variant generation for a finished package."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
from typing import Iterable

from copy_agent.automation.generation import GenerationService
from copy_agent.constants import VARIANT_STYLES
from copy_agent.core.post_processor import post_process
from copy_agent.prompts import SYSTEM_PROMPTS, append_context_blocks, build_variant_prompt
from copy_agent.schemas.artifacts import FinalPackage, VariantText

logger = logging.getLogger(__name__)


class VariantWriter:
    def __init__(self, service: GenerationService, max_workers: int = 5):
        self.service = service
        self.max_workers = max_workers

    def generate(self, final_text: str, styles: Iterable[str], extra_context: str = "") -> dict[str, str]:
        """One independent call per style. Failed styles are left out, not retried.

        ``extra_context`` (fact constraint, domain notes) is appended to every prompt.
        """
        styles = list(styles)
        if not styles:
            return {}
        max_workers = min(self.max_workers, len(styles))
        logger.info(f"Generating {len(styles)} variants in parallel (max_workers={max_workers})")

        def generate_single(style: str) -> str:
            prompt = append_context_blocks(build_variant_prompt(final_text, style, VariantText), extra_context)
            result = self.service.generate(SYSTEM_PROMPTS["variants"], prompt, VariantText, step="variants")
            return post_process(result.text)

        variants: dict[str, str] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(generate_single, style): style for style in styles}
            for future in as_completed(futures):
                style = futures[future]
                try:
                    variants[style] = future.result()
                except Exception as e:
                    logger.error(f"Failed to generate variant '{style}': {e}")
        return {style: variants[style] for style in styles if style in variants}

    def fill_missing(self, package: FinalPackage, extra_context: str = "") -> FinalPackage:
        missing = [style for style in VARIANT_STYLES if style not in package.variants]
        if not missing:
            return package
        generated = self.generate(package.final, missing, extra_context)
        return package.model_copy(update={"variants": {**package.variants, **generated}})
