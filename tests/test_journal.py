import io

from openpyxl import load_workbook

from market_warrior.models import JournalLead
from tests.conftest import auth_headers, make_enrollment


def test_signup_is_idempotent_per_email(client, db, sent_emails):
    first = client.post("/journal-signup", json={"email": "Trader@Example.com", "name": "Kim"})
    assert first.status_code == 200
    assert "Check your email" in first.json()["message"]

    second = client.post("/journal-signup", json={"email": "trader@example.com"})
    assert second.status_code == 200
    assert "already signed up" in second.json()["message"]

    assert db.query(JournalLead).count() == 1
    assert db.query(JournalLead).one().email == "trader@example.com"
    assert [e["subject"] for e in sent_emails] == ["Your Free Trading Journal Template"]


def test_signup_rejects_invalid_email(client, db):
    response = client.post("/journal-signup", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email format"


def test_trades_and_export(client, db):
    make_enrollment(db)
    headers = auth_headers("user-1")

    long_trade = {
        "symbol": "AAPL",
        "trade_type": "long",
        "entry_date": "2026-03-02T14:30:00Z",
        "exit_date": "2026-03-03T15:00:00Z",
        "entry_price": "180.50",
        "exit_price": "185.00",
        "quantity": "10",
        "strategy": "Breakout",
    }
    short_trade = {
        "symbol": "TSLA",
        "trade_type": "short",
        "entry_date": "2026-03-04T14:30:00Z",
        "entry_price": "200",
        "exit_price": "210",
        "quantity": "2",
    }

    created = client.post("/journal/trades", json=long_trade, headers=headers)
    assert created.status_code == 201
    assert created.json()["pnl"] == 45.0
    assert client.post("/journal/trades", json=short_trade, headers=headers).json()["pnl"] == -20.0

    trades = client.get("/journal/trades", headers=headers).json()
    assert [t["symbol"] for t in trades] == ["TSLA", "AAPL"]

    export = client.get("/journal/export", headers=headers)
    assert export.status_code == 200
    assert "attachment" in export.headers["content-disposition"]

    workbook = load_workbook(io.BytesIO(export.content))
    assert workbook.sheetnames == ["Trades", "Summary"]
    rows = list(workbook["Trades"].iter_rows(values_only=True))
    assert rows[0][0] == "Date"
    assert len(rows) == 3
    summary = dict(workbook["Summary"].iter_rows(min_row=2, values_only=True))
    assert summary["Total Trades"] == 2
    assert summary["Wins"] == 1
    assert summary["Total P&L"] == "$25.00"


def test_trade_type_validated(client, db):
    make_enrollment(db)
    response = client.post(
        "/journal/trades",
        json={"symbol": "X", "trade_type": "sideways", "entry_date": "2026-03-02T00:00:00Z", "entry_price": "1", "quantity": "1"},
        headers=auth_headers("user-1"),
    )
    assert response.status_code == 400
