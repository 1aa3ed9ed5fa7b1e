"""
Severity Classification Service.
Re-derives a canonical level from a diagnostic trouble code and message.

The level field of raw vehicle logs is unreliable, so every ingested entry
is classified from its code first, then its message. Both passes are plain
ordered rule tables and can be replaced or extended by the caller.
"""

from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Union

from ..models.log_entry import LogLevel
from .log_parser import clean_code
from ..config.settings import get_settings
from ..config.logging_config import get_logger

logger = get_logger(__name__)


class ClassificationRule(NamedTuple):
    """A named (predicate, level) pair."""
    name: str
    predicate: Callable[[str], bool]
    level: LogLevel


def code_range(prefix: str, start: int, end: int) -> frozenset:
    """Build a set of codes such as P0300..P0308 (inclusive)."""
    return frozenset(f"{prefix}{n:04d}" for n in range(start, end + 1))


# Generic powertrain (P0)
MISFIRE_CODES = code_range("P", 300, 308)
FUEL_TRIM_CODES = frozenset({"P0171", "P0172", "P0174", "P0175"})
CATALYST_CODES = frozenset({"P0420", "P0430"})
MAF_CODES = code_range("P", 100, 109)
INJECTOR_CODES = code_range("P", 200, 208)

# Body (B0)
AIRBAG_CODES = code_range("B", 1, 9) | code_range("B", 100, 103)
SEATBELT_CODES = code_range("B", 70, 79)

# Chassis (C0)
BRAKE_CRITICAL_CODES = code_range("C", 0, 9)
ABS_CODES = frozenset({"C0035", "C0040", "C0045", "C0050"})

# Network (U0)
NETWORK_CRITICAL_CODES = frozenset({"U0000", "U0001", "U0002"})

CODE_CATEGORIES: Dict[str, str] = {
    "P": "powertrain",
    "B": "body",
    "C": "chassis",
    "U": "network",
}


def _in(codes: frozenset) -> Callable[[str], bool]:
    return lambda code: code in codes


def _prefix(*prefixes: str) -> Callable[[str], bool]:
    return lambda code: code.startswith(prefixes)


def _keywords(*words: str) -> Callable[[str], bool]:
    lowered = tuple(w.lower() for w in words)
    return lambda message: any(w in message.lower() for w in lowered)


def default_code_rules(
    unknown_powertrain_level: LogLevel = LogLevel.WARNING,
    manufacturer_powertrain_level: LogLevel = LogLevel.WARNING,
) -> List[ClassificationRule]:
    """
    Code-prefix dispatch table, most specific rules first.

    Args:
        unknown_powertrain_level: Level for P0 codes outside the curated sets
        manufacturer_powertrain_level: Level for P1/P2/P3 codes
    """
    return [
        ClassificationRule("misfire", _in(MISFIRE_CODES), LogLevel.ERROR),
        ClassificationRule("fuel_trim", _in(FUEL_TRIM_CODES), LogLevel.WARNING),
        ClassificationRule("catalyst_efficiency", _in(CATALYST_CODES), LogLevel.WARNING),
        ClassificationRule("mass_air_flow", _in(MAF_CODES), LogLevel.WARNING),
        ClassificationRule("injector_circuit", _in(INJECTOR_CODES), LogLevel.WARNING),
        ClassificationRule("generic_powertrain", _prefix("P0"), unknown_powertrain_level),
        ClassificationRule(
            "manufacturer_powertrain", _prefix("P1", "P2", "P3"), manufacturer_powertrain_level
        ),
        ClassificationRule("airbag", _in(AIRBAG_CODES), LogLevel.ERROR),
        ClassificationRule("seatbelt", _in(SEATBELT_CODES), LogLevel.WARNING),
        ClassificationRule("body", _prefix("B0"), LogLevel.WARNING),
        ClassificationRule("brake_critical", _in(BRAKE_CRITICAL_CODES), LogLevel.ERROR),
        ClassificationRule("abs", _in(ABS_CODES), LogLevel.WARNING),
        ClassificationRule("chassis", _prefix("C0"), LogLevel.WARNING),
        ClassificationRule("network_critical", _in(NETWORK_CRITICAL_CODES), LogLevel.ERROR),
        ClassificationRule("network", _prefix("U0"), LogLevel.WARNING),
    ]


def default_message_rules() -> List[ClassificationRule]:
    """
    Message keyword overrides. Every matching rule overwrites the level,
    so with several matches the last one in this order wins. Keywords are
    case-insensitive substrings: "ok" also matches "smoke".
    """
    return [
        ClassificationRule("error_keywords", _keywords("fault", "failure", "critical"), LogLevel.ERROR),
        ClassificationRule("warning_keywords", _keywords("warning", "below threshold"), LogLevel.WARNING),
        ClassificationRule("debug_keywords", _keywords("debug", "test"), LogLevel.DEBUG),
        ClassificationRule("info_keywords", _keywords("info", "status", "normal", "ok"), LogLevel.INFO),
    ]


def _as_level(value: Union[str, LogLevel]) -> LogLevel:
    level = value if isinstance(value, LogLevel) else LogLevel.from_token(value)
    if level is None:
        raise ValueError(f"Unknown severity level: {value!r}")
    return level


class SeverityClassifier:
    """
    Classifier for diagnostic log severity.

    ``classify`` is pure: it holds no state between calls and performs no
    I/O, so the same (code, message) always yields the same level.
    """

    DEFAULT_LEVEL = LogLevel.INFO

    def __init__(
        self,
        code_rules: Optional[Sequence[ClassificationRule]] = None,
        message_rules: Optional[Sequence[ClassificationRule]] = None,
        unknown_powertrain_level: Union[str, LogLevel] = LogLevel.WARNING,
        manufacturer_powertrain_level: Union[str, LogLevel] = LogLevel.WARNING,
    ):
        if code_rules is None:
            code_rules = default_code_rules(
                _as_level(unknown_powertrain_level),
                _as_level(manufacturer_powertrain_level),
            )
        self.code_rules = tuple(code_rules)
        self.message_rules = tuple(
            default_message_rules() if message_rules is None else message_rules
        )

    @classmethod
    def from_settings(cls, settings=None) -> "SeverityClassifier":
        """
        Build a classifier using the configured powertrain variants.

        Unrecognised level names fall back to WARNING with a logged warning.
        """
        settings = settings or get_settings()
        levels = {}
        for name in ("unknown_powertrain_level", "manufacturer_powertrain_level"):
            value = getattr(settings, name)
            level = LogLevel.from_token(value)
            if level is None:
                logger.warning(f"Invalid {name} {value!r}, using WARNING")
                level = LogLevel.WARNING
            levels[name] = level
        return cls(**levels)

    def classify(self, code: Optional[str], message: Optional[str]) -> LogLevel:
        """
        Classify a diagnostic entry.

        Args:
            code: Trouble code, with or without a CODE: prefix
            message: Free-text description

        Returns:
            Canonical severity level
        """
        level = self.classify_code(code)
        message_level = self.classify_message(message)
        if message_level is not None:
            level = message_level
        return level or self.DEFAULT_LEVEL

    def classify_code(self, code: Optional[str]) -> Optional[LogLevel]:
        """Level implied by the code alone (first matching rule), or None."""
        code = clean_code(code)
        if not code:
            return None
        for rule in self.code_rules:
            if rule.predicate(code):
                return rule.level
        return None

    def classify_message(self, message: Optional[str]) -> Optional[LogLevel]:
        """Level implied by message keywords (last matching rule), or None."""
        if not message:
            return None
        level = None
        for rule in self.message_rules:
            if rule.predicate(message):
                level = rule.level
        return level


def describe_code(code: Optional[str]) -> Dict[str, Union[str, bool]]:
    """
    Describe the DTC family of a code.

    Returns:
        Dictionary with ``category`` and ``is_generic``
    """
    code = clean_code(code)
    if not code:
        return {"category": "unknown", "is_generic": False}
    category = CODE_CATEGORIES.get(code[0], "unknown")
    # Generic codes have 0, 2 or 3 as the second character
    is_generic = category != "unknown" and len(code) > 1 and code[1] in "023"
    return {"category": category, "is_generic": is_generic}

