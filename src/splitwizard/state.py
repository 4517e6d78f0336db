"""Per-user split sessions held in memory for the lifetime of the bot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from splitwizard.models import Screen
from splitwizard.services.wizard import Wizard

ALL_BILLS = "all"


@dataclass(slots=True)
class Session:
    wizard: Wizard = field(default_factory=Wizard)
    active_bill_id: Optional[str] = None
    preview_person_id: Optional[str] = None
    items_preview: str = ALL_BILLS
    copied: bool = False
    pending_import: bool = False

    def clear_view(self) -> None:
        self.active_bill_id = None
        self.preview_person_id = None
        self.items_preview = ALL_BILLS
        self.copied = False
        self.pending_import = False

    def reset(self) -> None:
        self.wizard.reset()
        self.clear_view()

    def active_bill(self) -> Optional[str]:
        ledger = self.wizard.ledger
        if self.active_bill_id and ledger.get_bill(self.active_bill_id) is not None:
            return self.active_bill_id
        return ledger.bills[0].id if ledger.bills else None

    def on_results(self) -> bool:
        return self.wizard.screen == Screen.RESULTS


class SessionStore:
    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}

    def get(self, user_id: int) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            session = self._sessions[user_id] = Session()
        return session

    def peek(self, user_id: int) -> Optional[Session]:
        return self._sessions.get(user_id)

    def drop(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
