"""
===============================================================================
ChecklistFormView – base view of one checklist form
-------------------------------------------------------------------------------
Layout (scrollable)
    Section 1    Date, Monitor Name and the form's extra header fields
    Body         built by the subclass (row editors, text boxes, ...)
    Signature    the shared signature pad bound to ``signature_attr``
    Bottom bar   Submit / Save Draft / Reset

Behaviour
    - a stored draft is loaded when the view opens
    - every change schedules a draft save (debounced)
    - Submit shows all validation errors at once; warnings are confirmed
      with a yes/no dialog before the form is submitted anyway
===============================================================================
"""
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Callable, ClassVar, List, Optional, Sequence, Tuple, Type

from core.helpers.date_time_helper import local_today_iso
from signature.gui.signature_pad_widget import SignaturePadWidget
from ..exceptions.errors import (
    ChecklistError,
    ChecklistValidationError,
    ConfirmationRequiredError,
    DraftError,
)
from ..logic.draft_store import DraftStore
from ..logic.submission_service import ChecklistSubmissionService
from ..models.base_form import ChecklistForm

log = logging.getLogger(__name__)

AUTOSAVE_DELAY_MS = 1500

# (label, attribute, combobox values or None)
HeaderField = Tuple[str, str, Optional[Sequence[str]]]


class ChecklistFormView(ttk.Frame):
    form_cls: ClassVar[Type[ChecklistForm]]
    signature_attr: ClassVar[str] = "monitor_signature"
    signature_label: ClassVar[str] = "Monitor Signature"
    monitor_label: ClassVar[str] = "Monitor Name"

    def __init__(
        self,
        parent: tk.Misc,
        *,
        service: ChecklistSubmissionService,
        drafts: Optional[DraftStore] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service
        self._drafts = drafts
        self._autosave_job: Optional[str] = None
        self._header_vars: List[Tuple[str, tk.StringVar]] = []

        self.form = self._initial_form()

        self.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)
        self._build_scroll_area()
        self._build_bottom_bar()
        self._build_content()

    # ------------------------------------------------------------------ #
    #  To be provided by the concrete views                              #
    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[HeaderField]:
        return []

    def build_body(self, parent: ttk.Frame) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------ #
    #  Form lifecycle                                                    #
    # ------------------------------------------------------------------ #
    def _initial_form(self) -> ChecklistForm:
        form = None
        if self._drafts is not None:
            form = self._drafts.load(self.form_cls)
            if form is not None:
                log.info("draft restored for %s", self.form_cls.checklist_type.key)
        if form is None:
            form = self.new_form()
        return form

    def new_form(self) -> ChecklistForm:
        return self.form_cls(date=local_today_iso())

    def changed(self) -> None:
        """Called by every editor after the model changed."""
        if self._drafts is None:
            return
        if self._autosave_job is not None:
            self.after_cancel(self._autosave_job)
        self._autosave_job = self.after(AUTOSAVE_DELAY_MS, self._autosave)

    def _autosave(self) -> None:
        self._autosave_job = None
        try:
            self._drafts.save(self.form)
        except DraftError as exc:
            log.warning("autosave failed: %s", exc)

    # ------------------------------------------------------------------ #
    #  Layout                                                            #
    # ------------------------------------------------------------------ #
    def _build_scroll_area(self) -> None:
        self._canvas = tk.Canvas(self, highlightthickness=0)
        vsb = ttk.Scrollbar(self, orient="vertical", command=self._canvas.yview)
        hsb = ttk.Scrollbar(self, orient="horizontal", command=self._canvas.xview)
        self._canvas.configure(yscrollcommand=vsb.set, xscrollcommand=hsb.set)
        self._canvas.grid(row=0, column=0, sticky="nsew")
        vsb.grid(row=0, column=1, sticky="ns")
        hsb.grid(row=1, column=0, sticky="ew")

        self._content = ttk.Frame(self._canvas, padding=12)
        self._content_id = self._canvas.create_window(0, 0, anchor="nw", window=self._content)
        self._content.bind(
            "<Configure>", lambda _e: self._canvas.configure(scrollregion=self._canvas.bbox("all"))
        )
        self._canvas.bind("<Configure>", self._fit_width)

    def _fit_width(self, event) -> None:
        # content follows the window width but may grow wider (wide row editors)
        needed = self._content.winfo_reqwidth()
        self._canvas.itemconfigure(self._content_id, width=max(event.width, needed))

    def _build_bottom_bar(self) -> None:
        bar = ttk.Frame(self)
        bar.grid(row=2, column=0, columnspan=2, sticky="ew", padx=8, pady=6)
        bar.columnconfigure(0, weight=1)
        ttk.Label(bar, text=f"{self.form_cls.checklist_type.title}  ·  "
                            f"{self.form_cls.checklist_type.code}").grid(row=0, column=0, sticky="w")
        ttk.Button(bar, text="Reset", command=self.reset).grid(row=0, column=1, padx=4)
        ttk.Button(bar, text="Save Draft", command=self.save_draft).grid(row=0, column=2, padx=4)
        ttk.Button(bar, text="Submit", command=self.submit).grid(row=0, column=3, padx=4)

    def _build_content(self) -> None:
        for child in self._content.winfo_children():
            child.destroy()
        self._header_vars.clear()
        self._content.columnconfigure(0, weight=1)

        section1 = ttk.LabelFrame(self._content, text="Section 1", padding=8)
        section1.grid(row=0, column=0, sticky="ew", pady=(0, 10))
        fields: List[HeaderField] = [("Date (YYYY-MM-DD)", "date", None),
                                     (self.monitor_label, "monitor_name", None)]
        fields += self.header_fields()
        for i, (label, attr, values) in enumerate(fields):
            r, c = divmod(i, 2)
            ttk.Label(section1, text=label).grid(row=r, column=c * 2, sticky="w", padx=(0, 6), pady=2)
            var = tk.StringVar(value=str(getattr(self.form, attr) or ""))
            var.trace_add("write", self._header_writer(attr, var))
            if values is None:
                widget = ttk.Entry(section1, textvariable=var, width=28)
            else:
                widget = ttk.Combobox(section1, textvariable=var, values=list(values),
                                      state="readonly", width=26)
            widget.grid(row=r, column=c * 2 + 1, sticky="ew", padx=(0, 16), pady=2)
            self._header_vars.append((attr, var))
        section1.columnconfigure(1, weight=1)
        section1.columnconfigure(3, weight=1)

        body = ttk.Frame(self._content)
        body.grid(row=1, column=0, sticky="nsew")
        body.columnconfigure(0, weight=1)
        self.build_body(body)

        sig_frame = ttk.Frame(self._content)
        sig_frame.grid(row=2, column=0, sticky="ew", pady=(12, 0))
        sig_frame.columnconfigure(0, weight=1)
        self.signature = SignaturePadWidget(
            sig_frame,
            label=self.signature_label,
            on_change=self._on_signature,
            on_clear=lambda: self._on_signature(""),
            value=getattr(self.form, self.signature_attr) or "",
        )
        self.signature.grid(row=0, column=0, sticky="ew")

    def set_header(self, attr: str, value: str) -> None:
        """Update a Section 1 field from code (the trace writes it to the form)."""
        for name, var in self._header_vars:
            if name == attr:
                var.set(value)
                return
        setattr(self.form, attr, value)

    def _header_writer(self, attr: str, var: tk.StringVar) -> Callable[..., None]:
        def _write(*_args) -> None:
            setattr(self.form, attr, var.get())
            self.changed()
        return _write

    def _on_signature(self, value: str) -> None:
        setattr(self.form, self.signature_attr, value)
        self.changed()

    def text_box(self, parent: tk.Misc, attr: str, *, height: int = 3) -> tk.Text:
        """Multi-line text bound to ``form.<attr>``."""
        box = tk.Text(parent, height=height, wrap="word")
        box.insert("1.0", getattr(self.form, attr) or "")

        def _write(_event=None) -> None:
            setattr(self.form, attr, box.get("1.0", "end-1c"))
            self.changed()

        box.bind("<KeyRelease>", _write)
        return box

    # ------------------------------------------------------------------ #
    #  Actions                                                           #
    # ------------------------------------------------------------------ #
    def submit(self) -> None:
        try:
            result = self._service.submit(self.form)
        except ChecklistValidationError as exc:
            messagebox.showerror("Incomplete checklist", "\n".join(exc.errors), parent=self)
            return
        except ConfirmationRequiredError as exc:
            question = "\n".join(exc.warnings) + "\n\nSubmit anyway?"
            if not messagebox.askyesno("Please confirm", question, parent=self):
                return
            try:
                result = self._service.submit(self.form, confirm_warnings=True)
            except ChecklistError as inner:
                messagebox.showerror("Submission failed", str(inner), parent=self)
                return
        except ChecklistError as exc:
            messagebox.showerror("Submission failed", str(exc), parent=self)
            return

        if self._autosave_job is not None:
            self.after_cancel(self._autosave_job)
            self._autosave_job = None
        messagebox.showinfo("Checklist submitted", f"Stored as {result.filename}", parent=self)
        self._replace_form(self.new_form())

    def save_draft(self) -> None:
        if self._drafts is None:
            return
        try:
            kept = self._drafts.save(self.form)
        except DraftError as exc:
            messagebox.showerror("Draft", str(exc), parent=self)
            return
        messagebox.showinfo("Draft", "Draft saved." if kept else "Nothing to save yet.", parent=self)

    def reset(self) -> None:
        if self.form.has_meaningful_data() and not messagebox.askyesno(
            "Reset", "Discard all entries of this checklist?", parent=self
        ):
            return
        if self._drafts is not None:
            self._drafts.clear(self.form_cls.checklist_type.key)
        self._replace_form(self.new_form())

    def _replace_form(self, form: ChecklistForm) -> None:
        self.form = form
        self._build_content()
        self.signature.set_value(getattr(form, self.signature_attr) or "")
