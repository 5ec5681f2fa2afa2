"""
NumberGridView - Grid of target cells with a learning mode picker.

Polls the session's sequence snapshot on the Tk thread and repaints only the
cells whose item changed.
"""
import tkinter as tk
from tkinter import ttk
from typing import Dict, List, Optional, Tuple

from numberexplorer.ListeningSession import ListeningSession
from numberexplorer.types import LearningMode, TargetItem

GRID_COLUMNS = 5
REFRESH_INTERVAL_MS = 100

ACTIVE_BACKGROUND = "#ffd60a"
COMPLETED_BACKGROUND = "#8e8e93"
PENDING_BACKGROUND = "#e5f0ff"


def cell_style(item: TargetItem) -> Tuple[str, str]:
    """Return (background, foreground) colors for a cell.

    Active wins over completed; completed cells use white text.
    """
    if item.is_active:
        return ACTIVE_BACKGROUND, "black"
    if item.is_completed:
        return COMPLETED_BACKGROUND, "white"
    return PENDING_BACKGROUND, "black"


def cell_text(item: TargetItem, mode: LearningMode) -> str:
    if mode is LearningMode.CHINESE:
        return item.spoken_form
    return item.digit_form


class NumberGridView(ttk.Frame):
    """
    Displays every TargetItem as a colored cell.

    Attributes:
        session: ListeningSession providing snapshots and mode switching
        cells: One tk.Label per item, in sequence order
    """

    def __init__(self, parent: tk.Widget, session: ListeningSession):
        super().__init__(parent)
        self.session = session
        self.cells: List[tk.Label] = []
        self._painted: Dict[int, Tuple[TargetItem, LearningMode]] = {}
        self._after_id: Optional[str] = None

        self.mode_var = tk.StringVar(value=session.mode.value)
        mode_frame = ttk.Frame(self)
        mode_frame.pack(pady=(0, 10))
        for mode in LearningMode:
            ttk.Radiobutton(
                mode_frame,
                text=mode.value,
                value=mode.value,
                variable=self.mode_var,
                command=self._on_mode_selected
            ).pack(side=tk.LEFT, padx=5)

        grid_frame = ttk.Frame(self)
        grid_frame.pack(fill=tk.BOTH, expand=True)
        for column in range(GRID_COLUMNS):
            grid_frame.columnconfigure(column, weight=1)

        for index, _ in enumerate(session.sequence_snapshot()):
            label = tk.Label(grid_frame, font=("Arial", 14), padx=6, pady=6)
            label.grid(row=index // GRID_COLUMNS, column=index % GRID_COLUMNS, padx=4, pady=4, sticky="nsew")
            self.cells.append(label)

        self.refresh()

    def refresh(self) -> None:
        """Repaint changed cells and schedule the next poll."""
        mode = self.session.mode
        for index, item in enumerate(self.session.sequence_snapshot()):
            if self._painted.get(index) == (item, mode):
                continue
            background, foreground = cell_style(item)
            self.cells[index].config(text=cell_text(item, mode), bg=background, fg=foreground)
            self._painted[index] = (item, mode)

        self._after_id = self.after(REFRESH_INTERVAL_MS, self.refresh)

    def stop_refresh(self) -> None:
        if self._after_id is not None:
            self.after_cancel(self._after_id)
            self._after_id = None

    def _on_mode_selected(self) -> None:
        self.session.set_mode(LearningMode(self.mode_var.get()))
