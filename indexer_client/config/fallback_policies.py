"""Per-operation fallback policy loader.

Parses a YAML file of the form::

    operations:
      default:
        enabled: true
        timeout_ms: 2000
      get_points_leaderboard:
        timeout_ms: 1000

Entries other than ``default`` inherit unset fields from the default entry.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from indexer_client.resilience.fallback import FallbackPolicy

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"


def load_fallback_policies(
    yaml_path: str | None,
    default: FallbackPolicy | None = None,
) -> dict[str, FallbackPolicy]:
    """Parse a fallback policies YAML file into typed FallbackPolicy objects.

    Args:
        yaml_path: Path to the YAML configuration file, or None.
        default: Policy used when the file has no ``default`` entry.

    Returns:
        A dict mapping operation names (and "default") to FallbackPolicy
        instances. A missing or malformed file yields only the default policy.
    """
    base = default or FallbackPolicy()

    if yaml_path is None:
        return {DEFAULT_KEY: base}

    path = Path(yaml_path)
    if not path.exists():
        logger.warning("Fallback policies file not found at %s, using defaults", yaml_path)
        return {DEFAULT_KEY: base}

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse fallback policies YAML at %s: %s", yaml_path, exc)
        return {DEFAULT_KEY: base}

    if not isinstance(raw, dict) or not isinstance(raw.get("operations"), dict):
        logger.warning("Fallback policies YAML missing 'operations' key, using defaults")
        return {DEFAULT_KEY: base}

    operations: dict = raw["operations"]

    default_config = operations.get(DEFAULT_KEY)
    if isinstance(default_config, dict):
        try:
            base = FallbackPolicy.model_validate({**base.model_dump(), **default_config})
        except ValidationError as exc:
            logger.error("Invalid default fallback policy: %s, keeping built-in", exc)

    policies: dict[str, FallbackPolicy] = {DEFAULT_KEY: base}
    for name, config in operations.items():
        if name == DEFAULT_KEY:
            continue
        if not isinstance(config, dict):
            logger.error("Fallback policy for '%s' is not a mapping, skipping", name)
            continue
        try:
            policies[name] = FallbackPolicy.model_validate({**base.model_dump(), **config})
        except ValidationError as exc:
            logger.error("Invalid fallback policy for '%s': %s, skipping", name, exc)

    return policies
