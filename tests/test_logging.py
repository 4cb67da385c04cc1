import logging

import pytest

from hrms.core.logging import FILE_HANDLER_NAME, configure_logging


@pytest.fixture()
def clean_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    for handler in saved_handlers:
        if handler.get_name() == FILE_HANDLER_NAME:
            root.removeHandler(handler)
    yield root
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)


def test_handlers_are_installed_once(clean_root_logger, tmp_path):
    log_path = tmp_path / "logs" / "hrms.log"

    configure_logging("DEBUG", log_path)
    configure_logging("WARNING", log_path)

    file_handlers = [h for h in clean_root_logger.handlers if h.get_name() == FILE_HANDLER_NAME]
    assert len(file_handlers) == 1
    assert clean_root_logger.level == logging.WARNING
    assert log_path.parent.is_dir()


def test_records_reach_the_log_file(clean_root_logger, tmp_path):
    log_path = tmp_path / "hrms.log"
    configure_logging(logging.INFO, log_path)

    logging.getLogger("hrms.test").info("leave approved")
    for handler in clean_root_logger.handlers:
        handler.flush()

    assert "| INFO | hrms.test | leave approved" in log_path.read_text(encoding="utf-8")
