import logging

from paperpilot.logging_utils import configure_logging


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        configure_logging("DEBUG")
        configure_logging("INFO")
        added = [h for h in root.handlers if getattr(h, "_paperpilot", False)]
        assert len(added) == 1
        assert root.level == logging.INFO
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
