"""
===============================================================================
ChecklistHubView – entry point of the checklists feature
-------------------------------------------------------------------------------
One notebook tab per checklist form plus a "Historial" tab of submitted
checklists. The views are created lazily when
their tab is first selected, so opening the hub does not touch every draft.
===============================================================================
"""
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk
from typing import Dict, Optional, Type, Union

from ..adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from ..logic.draft_store import DraftStore
from ..logic.submission_service import ChecklistSubmissionService
from ..repository.checklist_repository import ChecklistRepository
from ..repository.product_catalog_repository import ProductCatalogRepository
from .checklist_form_view import ChecklistFormView
from .checklist_history_view import ChecklistHistoryView
from .form_views import FORM_VIEWS, ProductoMixView

log = logging.getLogger(__name__)


class ChecklistHubView(ttk.Frame):
    def __init__(
        self,
        parent: tk.Misc,
        *,
        service: Optional[ChecklistSubmissionService] = None,
        drafts: Optional[DraftStore] = None,
        catalog: Optional[ProductCatalogRepository] = None,
        repository: Optional[ChecklistRepository] = None,
    ) -> None:
        super().__init__(parent)
        self._drafts = drafts or DraftStore()
        self._repository = repository or ChecklistRepository()
        self._service = service or ChecklistSubmissionService(
            storage=FilesystemStorageAdapter(),
            repository=self._repository,
            drafts=self._drafts,
        )
        self._catalog = catalog

        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)
        self._notebook = ttk.Notebook(self)
        self._notebook.grid(row=0, column=0, sticky="nsew")

        self._tabs: Dict[str, Type[Union[ChecklistFormView, ChecklistHistoryView]]] = {}
        self._views: Dict[str, ttk.Frame] = {}
        for view_cls in FORM_VIEWS:
            holder = ttk.Frame(self._notebook)
            holder.columnconfigure(0, weight=1)
            holder.rowconfigure(0, weight=1)
            title = view_cls.form_cls.checklist_type.title
            if self._drafts.exists(view_cls.form_cls.checklist_type.key):
                title += " •"
            self._notebook.add(holder, text=title)
            self._tabs[str(holder)] = view_cls
        history = ttk.Frame(self._notebook)
        history.columnconfigure(0, weight=1)
        history.rowconfigure(0, weight=1)
        self._notebook.add(history, text="Historial")
        self._tabs[str(history)] = ChecklistHistoryView
        self._notebook.bind("<<NotebookTabChanged>>", self._on_tab)

    def _on_tab(self, _event=None) -> None:
        holder_name = self._notebook.select()
        if not holder_name or holder_name in self._views:
            return
        view_cls = self._tabs[holder_name]
        holder = self._notebook.nametowidget(holder_name)
        if view_cls is ChecklistHistoryView:
            view = ChecklistHistoryView(holder, repository=self._repository)
        else:
            kwargs = dict(service=self._service, drafts=self._drafts)
            if view_cls is ProductoMixView:
                kwargs["catalog"] = self._catalog
            view = view_cls(holder, **kwargs)
        view.grid(row=0, column=0, sticky="nsew")
        self._views[holder_name] = view
        log.debug("opened checklist view %s", view_cls.__name__)
