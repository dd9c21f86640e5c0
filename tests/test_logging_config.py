import logging

from ipw.logging_config import setup_logging


def _file_handlers(name):
    return [h for h in logging.getLogger(name).handlers
            if isinstance(h, logging.FileHandler)]


def test_second_setup_closes_previous_log_file(tmp_path):
    first, second = tmp_path / "first.log", tmp_path / "second.log"
    setup_logging(logging.INFO, str(first))
    old = _file_handlers("ipw")[0]

    setup_logging(logging.INFO, str(second))
    assert old.stream is None or old.stream.closed
    for name in ("ipw", "blog"):
        handlers = _file_handlers(name)
        assert len(handlers) == 1
        assert handlers[0].baseFilename == str(second)

    logging.getLogger("ipw.tests").info("after reconfigure")
    for h in _file_handlers("ipw"):
        h.flush()
    assert "after reconfigure" in second.read_text(encoding="utf-8")
    assert "after reconfigure" not in first.read_text(encoding="utf-8")
    setup_logging(logging.WARNING)
