from __future__ import annotations

"""
Configuration Validation Service.

Normalizes raw configuration (from JSON files or CLI overrides) into the
typed settings the checker expects. Lenient mode coerces and records
warnings; strict mode raises on the first mismatch.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dtcheck.domain.config import (
    DIAGNOSTIC_SINKS,
    LOG_LEVELS,
    VIOLATION_MODES,
    get_default_config,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for key in sorted(set(merged) - set(defaults)):
        msg = f"Unknown field '{key}'."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Ignored.")
        del merged[key]

    merged["max_depth"] = _as_optional_positive_int(
        merged["max_depth"], "max_depth", warnings, strict
    )
    merged["check_invariants"] = _as_bool(
        merged["check_invariants"], defaults["check_invariants"], "check_invariants", warnings, strict
    )
    merged["diagnostics"] = _as_choice(
        merged["diagnostics"], defaults["diagnostics"], DIAGNOSTIC_SINKS, "diagnostics", warnings, strict
    )
    merged["on_violation"] = _as_choice(
        merged["on_violation"], defaults["on_violation"], VIOLATION_MODES, "on_violation", warnings, strict
    )
    level = merged["log_level"]
    merged["log_level"] = _as_choice(
        level.strip().upper() if isinstance(level, str) else level,
        defaults["log_level"], LOG_LEVELS, "log_level", warnings, strict
    )

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_optional_positive_int(
        value: Any, field: str, warnings: List[str], strict: bool
) -> Optional[int]:
    """Accept None or a positive integer; numeric strings are coerced in lenient mode."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        if value > 0:
            return value
        msg = f"Invalid field '{field}': must be positive, received {value}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Disabled.")
        return None

    if not strict and isinstance(value, str) and value.strip().isdigit():
        n = int(value.strip())
        if n > 0:
            warnings.append(f"Field '{field}' converted from '{value}' to {n}.")
            return n

    msg = f"Invalid field '{field}': expected positive int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Disabled.")
    return None


def _as_choice(
        value: Any,
        fallback: str,
        choices: Sequence[str],
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Ensure a string belongs to a closed set of options."""
    if isinstance(value, str) and value in choices:
        return value

    msg = f"Invalid field '{field}': expected one of {list(choices)}, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
