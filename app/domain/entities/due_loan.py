"""Domain entity describing a borrowed book approaching its due date."""

from dataclasses import dataclass
from datetime import date


@dataclass
class DueLoan:
    """Loan reported by the borrowing workflow for a due-date reminder."""

    borrower_id: str
    book_title: str
    due_date: date
    request_id: str | None = None


__all__ = ["DueLoan"]
