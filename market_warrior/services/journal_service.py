"""
Trading journal service - lead capture and spreadsheet export
"""
import io
import logging
import re
from decimal import Decimal
from typing import List, Optional, Tuple
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from market_warrior.errors import ValidationError
from market_warrior.models import JournalLead, JournalTrade

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TRADE_COLUMNS = [
    ("Date", 12), ("Exit Date", 12), ("Symbol", 10), ("Type", 8),
    ("Entry Price", 12), ("Exit Price", 12), ("Quantity", 10), ("P&L", 12),
    ("Strategy", 15), ("Emotions", 20), ("Notes", 40), ("Lessons Learned", 40),
]


class JournalService:

    def signup_lead(self, db: Session, email: str, name: Optional[str] = None, source: Optional[str] = None) -> Tuple[JournalLead, bool]:
        """
        Register a journal lead, once per email

        Returns:
            Tuple of (lead, created)
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")

        existing = db.query(JournalLead).filter(JournalLead.email == email).first()
        if existing:
            return existing, False

        lead = JournalLead(email=email, name=name or None, source=source or "website")
        db.add(lead)
        db.commit()
        logger.info(f"Journal lead captured: {email}")
        return lead, True

    def compute_pnl(self, trade_type: str, entry_price: Decimal, exit_price: Optional[Decimal], quantity: Decimal) -> Optional[Decimal]:
        """Realised P&L of a closed trade; None while the trade is open"""
        if exit_price is None:
            return None
        direction = Decimal(1) if trade_type == "long" else Decimal(-1)
        return ((exit_price - entry_price) * quantity * direction).quantize(Decimal("0.01"))

    def add_trade(self, db: Session, user_id: str, **fields) -> JournalTrade:
        trade = JournalTrade(user_id=user_id, **fields)
        trade.pnl = self.compute_pnl(
            fields["trade_type"], fields["entry_price"], fields.get("exit_price"), fields["quantity"]
        )
        db.add(trade)
        db.commit()
        db.refresh(trade)
        return trade

    def list_trades(self, db: Session, user_id: str) -> List[JournalTrade]:
        return (
            db.query(JournalTrade)
            .filter(JournalTrade.user_id == user_id)
            .order_by(JournalTrade.entry_date.desc())
            .all()
        )

    def summary_rows(self, trades: List[JournalTrade]) -> List[Tuple[str, object]]:
        closed = [t for t in trades if t.exit_price is not None]
        wins = sum(1 for t in closed if t.pnl is not None and Decimal(t.pnl) > 0)
        total_pnl = sum((Decimal(t.pnl) for t in trades if t.pnl is not None), Decimal("0"))
        win_rate = f"{wins / len(closed) * 100:.1f}%" if closed else "0%"
        average = f"${total_pnl / len(closed):.2f}" if closed else "$0.00"

        return [
            ("Total Trades", len(trades)),
            ("Closed Trades", len(closed)),
            ("Wins", wins),
            ("Losses", len(closed) - wins),
            ("Win Rate", win_rate),
            ("Total P&L", f"${total_pnl:.2f}"),
            ("Average P&L", average),
        ]

    def export_xlsx(self, trades: List[JournalTrade]) -> bytes:
        """Build a workbook with a Trades sheet and a Summary sheet"""
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Trades"

        sheet.append([name for name, _ in TRADE_COLUMNS])
        for index, (_, width) in enumerate(TRADE_COLUMNS):
            sheet.column_dimensions[get_column_letter(index + 1)].width = width

        if not trades:
            sheet.append(["Add trades to your journal"])

        for t in trades:
            sheet.append([
                t.entry_date.date().isoformat() if t.entry_date else "",
                t.exit_date.date().isoformat() if t.exit_date else "",
                t.symbol or "",
                (t.trade_type or "").upper(),
                float(t.entry_price) if t.entry_price is not None else "",
                float(t.exit_price) if t.exit_price is not None else "",
                float(t.quantity) if t.quantity is not None else "",
                float(t.pnl) if t.pnl is not None else "",
                t.strategy or "",
                t.emotions or "",
                t.notes or "",
                t.lessons_learned or "",
            ])

        summary = workbook.create_sheet("Summary")
        summary.append(["Metric", "Value"])
        for row in self.summary_rows(trades):
            summary.append(list(row))
        summary.column_dimensions["A"].width = 15
        summary.column_dimensions["B"].width = 15

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


# Global instance
journal_service = JournalService()
