import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from humsafar.rules.models import Rules

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).resolve().parent.parent.parent / "rules.yaml"


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
    lines = content.splitlines()
    block: list[str] = []
    in_block = False

    for line in lines:
        stripped = line.strip()
        if stripped.startswith("```yaml"):
            in_block = True
            continue
        if in_block and stripped.startswith("```"):
            return "\n".join(block)
        if in_block:
            block.append(line)

    return "\n".join(block) if in_block else content


def parse_rules(data: dict[str, Any]) -> Rules:
    """Validate an already-parsed rules mapping."""
    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path | None = None) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    path = Path(path) if path is not None else DEFAULT_RULES_PATH
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    content = path.read_text()

    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {path} does not contain a mapping")

    rules = parse_rules(data)
    logger.debug("Loaded rules version %s from %s", rules.project.rules_version, path)
    return rules
