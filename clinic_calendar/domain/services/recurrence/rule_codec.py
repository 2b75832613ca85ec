"""
Recurrence rule codec.

Converts between the textual rule form stored with a series master
(``FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,WE;COUNT=10``) and ``RecurrenceRule``.
Only the subset of RFC 5545 the calendar uses is understood; unknown keys
are ignored.
"""

from dateutil.parser import isoparse

from clinic_calendar.domain.entities.recurrence_rule import (
    Frequency,
    RecurrenceRule,
    Weekday,
)
from clinic_calendar.domain.exceptions import RuleParseError

RRULE_PREFIX = "RRULE:"


def parse_rule(rule_string: str) -> RecurrenceRule:
    """
    Parse a rule string into a ``RecurrenceRule``.

    Keys and values are case-insensitive and an optional ``RRULE:`` prefix
    is accepted. ``UNTIL`` may be ``YYYYMMDD``, ``YYYYMMDDTHHMMSS[Z]`` or
    ``YYYY-MM-DD``; only its date is kept.

    Args:
        rule_string: Serialized rule

    Returns:
        The parsed rule

    Raises:
        RuleParseError: If the string is empty or malformed, the frequency is
            missing or unknown, interval or count are not positive integers,
            both count and until are given, or a date or weekday is invalid
    """
    if rule_string is None or not rule_string.strip():
        raise RuleParseError("Recurrence rule is empty")

    text = rule_string.strip()
    if text.upper().startswith(RRULE_PREFIX):
        text = text[len(RRULE_PREFIX):]

    parts: dict[str, str] = {}
    for part in text.split(";"):
        part = part.strip()
        if not part:
            continue
        key, separator, value = part.partition("=")
        if not separator or not key.strip():
            raise RuleParseError(f"Malformed rule part '{part}'", rule=rule_string)
        parts[key.strip().upper()] = value.strip()

    frequency_value = parts.get("FREQ")
    if not frequency_value:
        raise RuleParseError("Recurrence rule has no frequency", rule=rule_string)
    try:
        frequency = Frequency(frequency_value.upper())
    except ValueError as e:
        raise RuleParseError(f"Unrecognized frequency '{frequency_value}'", rule=rule_string) from e

    interval = _parse_positive_int("INTERVAL", parts.get("INTERVAL", "1"), rule_string)
    count = _parse_positive_int("COUNT", parts["COUNT"], rule_string) if "COUNT" in parts else None

    until = None
    if "UNTIL" in parts:
        if count is not None:
            raise RuleParseError("A rule cannot have both COUNT and UNTIL", rule=rule_string)
        try:
            until = isoparse(parts["UNTIL"]).date()
        except ValueError as e:
            raise RuleParseError(f"Invalid UNTIL date '{parts['UNTIL']}'", rule=rule_string) from e

    weekdays: list[Weekday] = []
    for token in parts.get("BYDAY", "").split(","):
        token = token.strip().upper()
        if not token:
            continue
        try:
            weekdays.append(Weekday[token])
        except KeyError as e:
            raise RuleParseError(f"Unrecognized weekday '{token}'", rule=rule_string) from e

    return RecurrenceRule(
        frequency=frequency,
        interval=interval,
        by_weekdays=tuple(weekdays),
        count=count,
        until=until,
    )


def serialize_rule(rule: RecurrenceRule) -> str:
    """Serialize ``rule`` in canonical key order: FREQ, INTERVAL, BYDAY, COUNT or UNTIL."""
    parts = [f"FREQ={rule.frequency.value}", f"INTERVAL={rule.interval}"]
    if rule.by_weekdays:
        parts.append("BYDAY=" + ",".join(day.code for day in rule.by_weekdays))
    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    elif rule.until is not None:
        parts.append(f"UNTIL={rule.until.year:04d}{rule.until.month:02d}{rule.until.day:02d}")
    return ";".join(parts)


def _parse_positive_int(key: str, value: str, rule_string: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise RuleParseError(f"{key} must be a positive integer, got '{value}'", rule=rule_string) from e
    if number < 1:
        raise RuleParseError(f"{key} must be a positive integer, got '{value}'", rule=rule_string)
    return number
