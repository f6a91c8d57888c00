"""Loading of manual merge rules from configuration.

Rules are kept out of source in a JSON document, either a bare list of
rule objects or ``{"rules": [...]}``. The document is validated when
loaded so a malformed rule fails startup rather than a detection pass.
"""

import json
from pathlib import Path

import structlog
from pydantic import TypeAdapter

from reviewscout.identity.schemas import MergeRule

logger = structlog.get_logger()

_RULES = TypeAdapter(list[MergeRule])


def parse_merge_rules(data: list | dict) -> list[MergeRule]:
    """Validate already-decoded rule data.

    Args:
        data: A list of rule mappings, or a mapping with a ``rules`` key

    Returns:
        Validated merge rules

    Raises:
        pydantic.ValidationError: If any rule is malformed
        ValueError: If the document shape is not recognized
    """
    if isinstance(data, dict):
        if "rules" not in data:
            msg = "Merge rule document must be a list or contain a 'rules' key"
            raise ValueError(msg)
        data = data["rules"]
    return _RULES.validate_python(data)


def load_merge_rules(path: str | Path | None) -> list[MergeRule]:
    """Load manual merge rules from a JSON file.

    Args:
        path: Rule file path; None means no manual rules

    Returns:
        Validated merge rules (empty when no path is configured)

    Raises:
        FileNotFoundError: If a configured path does not exist
        pydantic.ValidationError: If any rule is malformed
    """
    if path is None:
        logger.info("no merge rules configured")
        return []

    rules_path = Path(path)
    rules = parse_merge_rules(json.loads(rules_path.read_text(encoding="utf-8")))
    logger.info("merge rules loaded", path=str(rules_path), count=len(rules))
    return rules
