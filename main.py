import logging
import tkinter as tk
from tkinter import Frame, Label, Button, X, LEFT

from core.config.config_loader import config_loader
from core.config.config_service import config_service
from core.qm_logging.gui.log_view import LogView
from checklists.gui.checklist_hub_view import ChecklistHubView
from maintenance.gui.ticket_list_view import TicketListView

log = logging.getLogger(__name__)


class MainWindow(tk.Tk):
    def __init__(self):
        super().__init__()

        self.title(f"{config_loader.get_app_name()} {config_loader.get_version()}".strip())
        self.geometry("1200x800")
        self.active_view = None

        # Navigationsleiste (oben)
        self.nav_frame = Frame(self, height=40, bg="#dddddd")
        self.nav_frame.pack(side="top", fill=X)
        self.nav_buttons_frame = Frame(self.nav_frame, bg="#dddddd")
        self.nav_buttons_frame.pack(side=LEFT)

        # Anzeige-Bereich (Mitte)
        self.display_area = Frame(self, bg="white")
        self.display_area.pack(fill="both", expand=True)

        # Statusleiste (unten)
        self.status_bar = Label(self, text="", anchor="w", bg="#eeeeee")
        self.status_bar.pack(side="bottom", fill=X)

        self.refresh_navigation()
        self.load_view(ChecklistHubView, "Checklists")

    def refresh_navigation(self):
        """Ein Button pro Feature."""
        for widget in self.nav_buttons_frame.winfo_children():
            widget.destroy()
        for label, view_cls in (("Checklists", ChecklistHubView), ("Mantenimiento", TicketListView),
                                ("Auditoría", LogView)):
            Button(self.nav_buttons_frame, text=label,
                   command=lambda v=view_cls, l=label: self.load_view(v, l)).pack(side=LEFT, padx=5, pady=5)

    def clear_display_area(self):
        """Entfernt alle Widgets im Anzeigebereich."""
        for widget in self.display_area.winfo_children():
            widget.destroy()
        self.active_view = None

    def load_view(self, view_cls, label):
        """Lädt eine Feature-View in den Anzeigebereich."""
        self.clear_display_area()
        self.active_view = view_cls(self.display_area)
        self.active_view.pack(fill="both", expand=True)
        self.set_status(f"{label} geladen")
        log.info("view %s loaded", view_cls.__name__)

    def set_status(self, message):
        """Aktualisiert die Statusleiste."""
        self.status_bar.config(text=message)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config_service.general.debug_db_paths:
        for line in config_service.describe_db_paths():
            log.info(line)
    app = MainWindow()
    app.mainloop()


if __name__ == "__main__":
    main()
