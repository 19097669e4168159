"""
Branch label generation.

Each control-flow construct kind (if, while) draws numbers from its own
counter, so labels only need to be unique within one output file.
"""

from typing import List


class LabelGenerator:
    """Hands out numbered labels such as ``WHILE_START_0`` / ``WHILE_END_0``."""

    def __init__(self, prefix: str):
        if not prefix or not isinstance(prefix, str):
            raise ValueError("prefix must be a non-empty string")
        self.prefix = prefix
        self._next_id = 0

    def next_id(self) -> int:
        """Return a fresh number for one occurrence of the construct."""
        lid = self._next_id
        self._next_id += 1
        return lid

    def label(self, tag: str, lid: int) -> str:
        """Format the label named ``tag`` for occurrence ``lid``."""
        return f"{self.prefix}_{tag}_{lid}"

    def new_labels(self, *tags: str) -> List[str]:
        """Allocate one occurrence and return a label for each tag."""
        lid = self.next_id()
        return [self.label(tag, lid) for tag in tags]
