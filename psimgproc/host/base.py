"""
Collaborator interface to the image editor.

Everything above this layer talks to these three classes only. A binding
translates each call into the editor's own automation surface and raises
``HostError`` when the editor refuses a call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

from psimgproc.models.enums import AnchorPosition, ResampleMethod, Units
from psimgproc.models.options import OpenPreset


class HostSelection(ABC):
    @abstractmethod
    def select_transparency(self) -> None:
        """Load the active layer's transparency channel as the selection."""

    @property
    @abstractmethod
    def solid(self) -> bool:
        """True when the selection covers the whole canvas uniformly."""

    @property
    @abstractmethod
    def is_empty(self) -> bool: ...

    @abstractmethod
    def magic_wand(self, x: int, y: int, tolerance: int = 32, anti_alias: bool = True,
                   contiguous: bool = False, merged: bool = False) -> None: ...

    @abstractmethod
    def deselect(self) -> None: ...

    @abstractmethod
    def clear(self) -> None:
        """Delete the selected pixels."""


class HostDocument(ABC):
    @property
    @abstractmethod
    def width(self) -> float: ...

    @property
    @abstractmethod
    def height(self) -> float: ...

    @property
    @abstractmethod
    def resolution(self) -> float: ...

    @property
    @abstractmethod
    def selection(self) -> HostSelection: ...

    @property
    @abstractmethod
    def closed(self) -> bool: ...

    @abstractmethod
    def resize_image(self, width: Optional[float] = None, height: Optional[float] = None,
                     resample: ResampleMethod = ResampleMethod.BICUBIC) -> None:
        """Resize; when only one dimension is given the other follows proportionally."""

    @abstractmethod
    def resize_canvas(self, width: float, height: float,
                      anchor: AnchorPosition = AnchorPosition.MIDDLE_CENTER) -> None: ...

    @abstractmethod
    def rename_base_layer(self, name: str) -> None:
        """Rename the bottom art layer and, if there is one, the first layer comp."""

    @abstractmethod
    def add_color_sampler(self, x: int, y: int) -> Tuple[int, int, int]: ...

    @abstractmethod
    def export_for_web(self, path: Path, options) -> None: ...

    @abstractmethod
    def save_as(self, path: Path, options) -> None: ...

    @abstractmethod
    def close(self, save_changes: bool = False) -> None: ...


class HostApplication(ABC):
    @abstractmethod
    def set_units(self, ruler: Units, type_units: Units) -> None: ...

    @abstractmethod
    def open(self, path: Path, options: Optional[OpenPreset] = None) -> HostDocument: ...

    @abstractmethod
    def do_action(self, name: str, folder: str) -> None:
        """Play a recorded action stored inside the editor."""

    @contextmanager
    def thread_scope(self) -> Iterator["HostApplication"]:
        """Per-thread setup for bindings that need it (COM apartments)."""
        yield self
