"""
Jack Symbol Table

Maps declared variable names to their type, storage kind and running index.
A compiling unit owns two tables: one for the class scope and one for the
subroutine scope, which is reset at the start of every subroutine.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union


class Kind(Enum):
    """Storage kind of a variable."""

    STATIC = "static"
    FIELD = "field"
    ARG = "argument"
    VAR = "local"

    @classmethod
    def coerce(cls, kind: Union['Kind', str]) -> 'Kind':
        """Accept a Kind or its string value ('static', 'field', ...)."""
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise ValueError(f"Illegal variable kind: {kind!r}") from None


@dataclass(frozen=True)
class SymbolEntry:
    """A single declared variable."""

    name: str
    type: str
    kind: Kind
    index: int


class SymbolTable:
    """One scope of declared variables."""

    def __init__(self):
        self._entries: List[SymbolEntry] = []
        self._by_name: Dict[str, SymbolEntry] = {}
        self._counts: Dict[Kind, int] = {kind: 0 for kind in Kind}

    def define(self, name: str, type: str, kind: Union[Kind, str]) -> int:
        """
        Define a new variable and assign it the next index of its kind.

        Redefining a name adds a second entry; lookups return the newest one.

        Returns:
            The index assigned to the variable
        """
        kind = Kind.coerce(kind)
        index = self._counts[kind]
        self._counts[kind] += 1

        entry = SymbolEntry(name, type, kind, index)
        self._entries.append(entry)
        self._by_name[name] = entry
        return index

    def reset(self) -> None:
        """Forget all entries and restart every index at 0."""
        self._entries.clear()
        self._by_name.clear()
        for kind in self._counts:
            self._counts[kind] = 0

    def lookup(self, name: str) -> Optional[SymbolEntry]:
        """Return the last entry defined for ``name``, or None."""
        return self._by_name.get(name)

    def kind_of(self, name: str) -> Optional[Kind]:
        entry = self.lookup(name)
        return entry.kind if entry else None

    def type_of(self, name: str) -> Optional[str]:
        entry = self.lookup(name)
        return entry.type if entry else None

    def index_of(self, name: str) -> Optional[int]:
        entry = self.lookup(name)
        return entry.index if entry else None

    def var_count(self, kind: Union[Kind, str]) -> int:
        """Return the number of variables of ``kind`` defined so far."""
        return self._counts[Kind.coerce(kind)]

    @property
    def entries(self) -> List[SymbolEntry]:
        """All entries in declaration order."""
        return list(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SymbolEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"SymbolTable({len(self._entries)} entries)"
