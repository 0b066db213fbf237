"""
Cleaning Rules Module
=====================
Declarative configuration for the cleaner: three boolean switches and a
missing-value policy. Rules are immutable once built and are validated
at construction.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from tabclean.config import DEFAULT_RULES, MISSING_STRATEGIES

logger = logging.getLogger(__name__)


class InvalidRuleError(ValueError):
    """Raised when a rule value or rules payload cannot be understood."""
    pass


class MissingStrategy:
    """Allowed values of ``CleaningRules.handle_missing``."""

    KEEP = "keep"
    DROP = "drop"
    FILL = "fill"

    ALL = MISSING_STRATEGIES


# Wire (camelCase) name -> field name
_PAYLOAD_KEYS = {
    "removeDuplicates": "remove_duplicates",
    "removeEmptyRows": "remove_empty_rows",
    "trimWhitespace": "trim_whitespace",
    "handleMissing": "handle_missing",
}

_BOOLEAN_FIELDS = ("remove_duplicates", "remove_empty_rows", "trim_whitespace")


def _coerce_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidRuleError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class CleaningRules:
    """Which cleaning steps to run and how to treat missing values."""

    remove_duplicates: bool = False
    remove_empty_rows: bool = False
    trim_whitespace: bool = False
    handle_missing: str = MissingStrategy.KEEP

    def __post_init__(self) -> None:
        if self.handle_missing not in MissingStrategy.ALL:
            raise InvalidRuleError(
                f"handle_missing must be one of {list(MissingStrategy.ALL)}, "
                f"got {self.handle_missing!r}"
            )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CleaningRules":
        """
        Build rules from a user-supplied mapping.

        Accepts the camelCase keys of the JSON request body
        (``removeDuplicates``, ``handleMissing``...) as well as the field
        names. Missing keys take their defaults; unknown keys are ignored.
        """
        if not isinstance(payload, Mapping):
            raise InvalidRuleError(f"Rules payload must be a mapping, got {type(payload).__name__}")

        values: dict[str, Any] = {}
        for key, value in payload.items():
            field_name = _PAYLOAD_KEYS.get(key, key)
            if field_name in _BOOLEAN_FIELDS:
                values[field_name] = _coerce_flag(key, value)
            elif field_name == "handle_missing":
                if not isinstance(value, str):
                    raise InvalidRuleError(f"{key} must be a string, got {value!r}")
                values[field_name] = value.strip().lower()
            else:
                logger.debug("Ignoring unknown rule key %r", key)
        return cls(**values)

    @classmethod
    def defaults(cls) -> "CleaningRules":
        """Rules configured through the environment (see ``config.DEFAULT_RULES``)."""
        return cls.from_dict(DEFAULT_RULES)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase payload form of these rules."""
        fields = asdict(self)
        return {wire: fields[name] for wire, name in _PAYLOAD_KEYS.items()}

    def describe(self) -> str:
        enabled = [name for name in _BOOLEAN_FIELDS if getattr(self, name)]
        enabled.append(f"handle_missing={self.handle_missing}")
        return ", ".join(enabled)
