import logging

from alertdesk.logging_utils import configure_logging


def test_configure_logging_accepts_level_names() -> None:
    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("not-a-level")
    assert logging.getLogger().level == logging.INFO
