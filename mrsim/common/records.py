"""
Key/value records exchanged between the map transform, the partitioner
and the reduce pipeline, plus the plain-text line format used on disk.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class KeyValue:
    """An immutable (key, value) pair of text"""
    key: str
    value: str

    @classmethod
    def coerce(cls, record: Any) -> "KeyValue":
        """
        Accept either a KeyValue or a (key, value) tuple from a map function

        Args:
            record: KeyValue instance or 2-item sequence

        Returns:
            KeyValue with both fields converted to str
        """
        if isinstance(record, KeyValue):
            return record
        key, value = record
        return cls(str(key), str(value))

    def to_line(self) -> str:
        """
        Format as a '<key> <value>' line (no trailing newline)

        Raises:
            ValueError: If the record would not read back unchanged: an empty
                key or one containing whitespace, or a value that is blank,
                spans lines or has surrounding whitespace
        """
        if self.key.split() != [self.key]:
            raise ValueError(f"Key {self.key!r} is empty or contains whitespace")
        if not self.value.strip() or self.value != self.value.strip() \
                or not is_single_line(self.value):
            raise ValueError(f"Value {self.value!r} for key {self.key!r} must be a non-blank "
                             f"single line without surrounding whitespace")
        return f"{self.key} {self.value}"


def is_single_line(text: str) -> bool:
    """True if text holds no line boundary (empty text counts as one line)"""
    return text.splitlines() in ([], [text])


def parse_line(line: str) -> Optional[KeyValue]:
    """
    Split a line on its first run of whitespace.

    Returns None for lines that do not hold at least two fields.
    """
    parts = line.strip().split(None, 1)
    if len(parts) < 2:
        return None
    return KeyValue(parts[0], parts[1])
