"""Workflow policy service (no IO besides loading the rules).

Implements ticket transition validation based on policy configuration.
Reads from maintenance_workflow_transitions.json.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from maintenance.models.ticket import TicketStatus

log = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
POLICY_FILE = "maintenance_workflow_transitions.json"


class WorkflowPolicy:
    """
    Policy evaluation for ticket transitions.

    Loads transition rules from JSON configuration.
    """

    def __init__(
        self,
        *,
        transitions: List[Dict[str, Any]],
        forbidden_transitions: List[str],
    ):
        """
        Args:
            transitions: List of transition rules (from JSON)
            forbidden_transitions: Forbidden transition patterns (e.g. "finalizada->*")
        """
        self._transitions = transitions or []
        self._forbidden = self._parse_forbidden(forbidden_transitions or [])

    @classmethod
    def load_from_directory(cls, directory: str | Path = CONFIG_DIR) -> "WorkflowPolicy":
        policy_file = Path(directory) / POLICY_FILE
        data: Dict[str, Any] = {}
        if policy_file.exists():
            try:
                with policy_file.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as exc:
                log.error("maintenance workflow rules unreadable (%s): %s", policy_file, exc)
                data = {}
        else:
            log.error("maintenance workflow rules missing: %s", policy_file)

        return cls(
            transitions=data.get("workflow_transitions", []),
            forbidden_transitions=data.get("forbidden_transitions", []),
        )

    def allowed_actions(self, status: TicketStatus | str) -> List[str]:
        """Action identifiers available from *status*, in rule order."""
        current = TicketStatus.parse(status)
        actions: List[str] = []
        for rule in self._transitions:
            if TicketStatus.parse(rule.get("from")) != current or current is None:
                continue
            target = TicketStatus.parse(rule.get("to"))
            if target is None or self._is_forbidden(current, target):
                continue
            action = str(rule.get("action", "")).strip().lower()
            if action:
                actions.append(action)
        return actions

    def next_status(self, *, action: str, status: TicketStatus | str) -> Optional[TicketStatus]:
        """Target status of *action* from *status*, or None when not allowed."""
        action = (action or "").strip().lower()
        current = TicketStatus.parse(status)
        if current is None:
            return None
        for rule in self._transitions:
            if TicketStatus.parse(rule.get("from")) != current:
                continue
            if str(rule.get("action", "")).strip().lower() != action:
                continue
            target = TicketStatus.parse(rule.get("to"))
            if target is None or self._is_forbidden(current, target):
                return None
            return target
        return None

    def requires_reason(self, action: str) -> bool:
        action = (action or "").strip().lower()
        return any(
            str(rule.get("action", "")).strip().lower() == action and rule.get("requirement") == "reason"
            for rule in self._transitions
        )

    # ------------------------------------------------------------------ #
    def _is_forbidden(self, from_status: TicketStatus, to_status: TicketStatus) -> bool:
        for forbidden_from, forbidden_to in self._forbidden:
            if forbidden_from == from_status and (forbidden_to is None or forbidden_to == to_status):
                return True
        return False

    @staticmethod
    def _parse_forbidden(items: List[str]) -> List[tuple[TicketStatus, Optional[TicketStatus]]]:
        """
        Examples:
        - "por_validar->pendiente" → (POR_VALIDAR, PENDIENTE)
        - "finalizada->*"          → (FINALIZADA, None)
        """
        result: List[tuple[TicketStatus, Optional[TicketStatus]]] = []
        for item in items:
            raw = str(item).strip()
            if "->" not in raw:
                continue
            left, right = (part.strip() for part in raw.split("->", 1))
            from_status = TicketStatus.parse(left)
            if from_status is None:
                log.warning("ignoring forbidden transition with unknown status: %s", raw)
                continue
            if right in ("*", ""):
                result.append((from_status, None))
                continue
            to_status = TicketStatus.parse(right)
            if to_status is not None:
                result.append((from_status, to_status))
        return result
