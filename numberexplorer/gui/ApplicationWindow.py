import tkinter as tk

from numberexplorer.gui.ControlPanel import ControlPanel
from numberexplorer.gui.NumberGridView import NumberGridView
from numberexplorer.ListeningSession import ListeningSession


class ApplicationWindow:
    """Top-level application window.
    Owns tkinter root and creates all GUI components directly.
    """

    def __init__(self, session: ListeningSession):
        """Initialize TK root and all GUI components.

        Args:
            session: ListeningSession driven by the window
        """
        self.session = session

        self.root = tk.Tk()
        self.root.title("Learn Numbers")
        self.root.geometry("520x900")

        main_frame = tk.Frame(self.root, padx=10, pady=10)
        main_frame.pack(fill=tk.BOTH, expand=True)

        title_label = tk.Label(main_frame, text="Learn Numbers", font=("Arial", 16, "bold"))
        title_label.pack(pady=(0, 10))

        self.grid_view = NumberGridView(main_frame, session)
        self.grid_view.pack(fill=tk.BOTH, expand=True)

        self.control_panel = ControlPanel(main_frame, session)
        self.control_panel.pack(fill=tk.X)

        self.root.protocol("WM_DELETE_WINDOW", self.close)

    def run(self) -> None:
        self.root.mainloop()

    def close(self) -> None:
        """Stop listening and destroy the window."""
        self.session.stop()
        self.grid_view.stop_refresh()
        try:
            self.root.destroy()
        except tk.TclError:
            pass
