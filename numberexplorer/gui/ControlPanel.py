import threading
import tkinter as tk
from tkinter import ttk

from numberexplorer.ListeningSession import ListeningSession
from numberexplorer.types import SessionState, SessionStatus


def button_text(state: SessionState) -> str:
    return "Stop Listening" if state.is_listening else "Start Listening"


def status_text(state: SessionState) -> str:
    """Status line shown under the toggle button."""
    if state.status is SessionStatus.ACTIVE:
        return "Listening..."
    if state.status is SessionStatus.RECOVERING:
        return f"Reconnecting (attempt {state.error_count})..."
    if state.last_failure:
        return f"Not listening: {state.last_failure}"
    return "Not listening"


class ControlPanel(ttk.Frame):
    """
    Control panel widget with the Start/Stop Listening toggle.
    Observes ListeningSession and updates its appearance accordingly.

    Attributes:
        session: ListeningSession instance
        button: Toggle button widget
        status_label: Shows listening / failure status
    """

    def __init__(self, parent: tk.Widget, session: ListeningSession):
        super().__init__(parent)

        self.session = session

        self.button = ttk.Button(
            self,
            text=button_text(session.current_state()),
            command=self._on_button_click
        )
        self.button.pack(pady=(10, 5))

        self.status_label = ttk.Label(self, text=status_text(session.current_state()))
        self.status_label.pack()

        self.session.register_observer(self._on_state_change)

    def _on_state_change(self, old_state: SessionState, new_state: SessionState) -> None:
        """
        Handle state changes from ListeningSession.

        Session observers run on whatever thread caused the transition, so
        widget updates are scheduled on the Tk thread via after(). Notifications
        from different threads can arrive out of order, so the update re-reads
        the current state instead of painting new_state.
        """
        if threading.current_thread() is threading.main_thread():
            self._update_for_state()
            return
        try:
            self.after(0, self._update_for_state)
        except RuntimeError:
            # main loop not running (e.g., during shutdown)
            pass

    def _update_for_state(self) -> None:
        state = self.session.current_state()
        self.button.config(text=button_text(state))
        self.status_label.config(text=status_text(state))

    def _on_button_click(self) -> None:
        self.session.toggle_listening()
