"""Tests for notification sinks"""
import logging

from storefront.notifications import LoggingNotifier, NotificationLevel, QueueNotifier


def test_queue_notifier_drain():
    notifier = QueueNotifier()
    notifier.success("Purchased 2 item(s)")
    notifier.error("Ladoo: out of stock")
    notifier.info("Some items failed")

    drained = notifier.drain()

    assert [(n.level, n.text) for n in drained] == [
        (NotificationLevel.SUCCESS, "Purchased 2 item(s)"),
        (NotificationLevel.ERROR, "Ladoo: out of stock"),
        (NotificationLevel.INFO, "Some items failed"),
    ]
    assert len(notifier) == 0


def test_queue_notifier_drops_oldest():
    notifier = QueueNotifier(maxlen=2)
    for i in range(3):
        notifier.info(f"msg {i}")

    assert [n.text for n in notifier.pending()] == ["msg 1", "msg 2"]


def test_logging_notifier(caplog):
    notifier = LoggingNotifier("storefront.notify.test")

    with caplog.at_level(logging.INFO, logger="storefront.notify.test"):
        notifier.success("done")
        notifier.error("failed")

    assert "[success] done" in caplog.text
    assert any(r.levelno == logging.ERROR and "failed" in r.getMessage() for r in caplog.records)
