import logging
import tkinter as tk

from core.config.config_service import config_service
from overlay_editor.gui.editor_view import EditorView


class MainWindow(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title(config_service.general.app_name or "PDF Overlay Editor")
        self.view = EditorView(self)
        self.view.pack(fill="both", expand=True)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def _on_close(self):
        self.view.close()
        self.destroy()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = MainWindow()
    app.mainloop()


if __name__ == "__main__":
    main()
