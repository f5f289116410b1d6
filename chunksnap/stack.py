from __future__ import annotations

from collections import deque
from typing import Deque, Tuple

from .section import EMPTY_SECTION, Section


class SectionStack:
    """Dense section array addressed by signed section index plus an offset.

    Starts with ``nominal_count + 1`` empty sections at offset 0 and grows in
    either direction as sections outside that range are placed. Not
    thread-safe; build on one thread, then :meth:`freeze`.
    """

    def __init__(self, nominal_count: int) -> None:
        if nominal_count < 0:
            raise ValueError(f"nominal section count must be >= 0, got {nominal_count}")
        self._sections: Deque[Section] = deque(EMPTY_SECTION for _ in range(nominal_count + 1))
        self.offset = 0

    def __len__(self) -> int:
        return len(self._sections)

    def place(self, section_y: int, section: Section) -> None:
        while section_y + self.offset >= len(self._sections):
            self._sections.append(EMPTY_SECTION)
        while section_y + self.offset < 0:
            self._sections.appendleft(EMPTY_SECTION)
            self.offset += 1
        self._sections[section_y + self.offset] = section

    def freeze(self) -> Tuple[Tuple[Section, ...], int]:
        return tuple(self._sections), self.offset
