"""
Pointer state machine for the manual erase mode.

    IDLE --pointer_down inside image--> PAINTING
    PAINTING --pointer_up / pointer_leave--> IDLE

Every pointer_down and every pointer_move while painting is one discrete
paint call. Gaps between fast pointer moves are not interpolated.
"""

from enum import Enum
from typing import Callable

# (pointer_x, pointer_y) -> True if something was painted
PaintCallback = Callable[[float, float], bool]


class EditState(Enum):
    IDLE = "idle"
    PAINTING = "painting"


class EraseSession:
    def __init__(self, paint: PaintCallback) -> None:
        if not callable(paint):
            raise ValueError(f"paint must be callable, got {type(paint)}")
        self._paint = paint
        self.state = EditState.IDLE
        self.dab_count = 0

    @property
    def is_painting(self) -> bool:
        return self.state is EditState.PAINTING

    def pointer_down(self, x: float, y: float) -> bool:
        """Start painting if the press lands inside the image."""
        if self._paint(x, y):
            self.dab_count += 1
            self.state = EditState.PAINTING
            return True
        return False

    def pointer_move(self, x: float, y: float) -> bool:
        if self.state is not EditState.PAINTING:
            return False
        if self._paint(x, y):
            self.dab_count += 1
            return True
        return False

    def pointer_up(self) -> None:
        self.state = EditState.IDLE

    def pointer_leave(self) -> None:
        self.state = EditState.IDLE
