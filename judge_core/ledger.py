"""Per-party fallacy ledger

A fallacy, once recorded, stays in the ledger with the severity it was first
recorded with. Entries are keyed by (utterance index, kind).
"""

from typing import Iterable, Iterator, Sequence

from .types import FlawEntry


class PartyLedger:
    """Append-only list of FlawEntry, deduplicated on insert"""

    def __init__(self, entries: Iterable[FlawEntry] = ()):
        self._entries: list[FlawEntry] = []
        self._keys: set[tuple[int, str]] = set()
        self.extend(entries)

    def add(self, entry: FlawEntry) -> bool:
        """Append `entry` unless its key is already recorded

        Returns:
            True if the entry was appended
        """
        if entry.key in self._keys:
            return False
        self._entries.append(entry)
        self._keys.add(entry.key)
        return True

    def extend(self, entries: Iterable[FlawEntry]) -> list[FlawEntry]:
        """Add every entry in order, returning the ones actually appended"""
        return [entry for entry in entries if self.add(entry)]

    def contains(self, utterance_index: int, kind: str) -> bool:
        return (utterance_index, kind) in self._keys

    @property
    def entries(self) -> list[FlawEntry]:
        return list(self._entries)

    @property
    def penalty_total(self) -> int:
        return sum(abs(entry.severity) for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FlawEntry]:
        return iter(self._entries)


def merge_fallacies(
    previous: Sequence[FlawEntry], current: Sequence[FlawEntry]
) -> list[FlawEntry]:
    """Merge newly detected fallacies into a prior ledger

    Prior entries keep their order and their recorded severity; new entries
    are appended in detection order, skipping any whose key already exists.
    """
    ledger = PartyLedger(previous)
    ledger.extend(current)
    return ledger.entries
