"""
Deterministic checks and bounded loops around generated copy.

- DraftValidator: Rule checks against the channel catalog
- post_process: Idempotent dash, exclamation and whitespace fixes
- FactInventoryEngine: Fact allow-list extraction and prompt constraint
- SlopScorer: Layered generic-language scoring
- RegenerationController: Validate-and-regenerate loop for the final package
"""

from .tokenizer import RegexTokenizer, Tokenizer
from .draft_validator import DraftConstraints, DraftValidator, format_violations_for_prompt, validate_draft
from .post_processor import post_process, post_process_package
from .fact_inventory import FactInventoryEngine, format_constraint
from .slop_scorer import SlopScorer
from .regeneration import RegenerationController, RegenerationOutcome

__all__ = [
    "RegexTokenizer",
    "Tokenizer",
    "DraftConstraints",
    "DraftValidator",
    "format_violations_for_prompt",
    "validate_draft",
    "post_process",
    "post_process_package",
    "FactInventoryEngine",
    "format_constraint",
    "SlopScorer",
    "RegenerationController",
    "RegenerationOutcome",
]
