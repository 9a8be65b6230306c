from __future__ import annotations

from optvault.state import Event, EventLog, EventRecord


def test_emit_numbers_records() -> None:
    log = EventLog()
    first = log.emit(EventRecord(Event.VAULT_OPENED, 0, account="alice"))
    second = log.emit(EventRecord(Event.COLLATERAL_DEPOSITED, 0, account="bob", amount=5, sequence=99))
    assert (first.sequence, second.sequence) == (0, 1)
    assert len(log) == 2


def test_filters() -> None:
    log = EventLog()
    log.emit(EventRecord(Event.VAULT_OPENED, 0))
    log.emit(EventRecord(Event.VAULT_OPENED, 1))
    log.emit(EventRecord(Event.DEBT_ISSUED, 1, amount=3))
    assert [r.vault_index for r in log.events(Event.VAULT_OPENED)] == [0, 1]
    assert [r.event for r in log.events(vault_index=1)] == [Event.VAULT_OPENED, Event.DEBT_ISSUED]
    assert log.events(Event.LIQUIDATED) == ()
    assert log.last().event is Event.DEBT_ISSUED
    assert log.last(Event.LIQUIDATED) is None


def test_to_dict_uses_wire_names() -> None:
    record = EventRecord(Event.UNSAFE_EVALUATED, 2, unsafe=True)
    d = record.to_dict()
    assert d["event"] == "UnsafeEvaluated"
    assert d["unsafe"] is True
    assert d["collateral_payout"] == 0
