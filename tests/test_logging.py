import numpy as np
from loguru import logger
from charon import TreeClassifier, enable_logging
from charon.logging import LoggingHandle


def _fit():
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    TreeClassifier(min_leaf=0, holdout=0.0).fit(X, [0, 0, 1, 1])


def test_silent_by_default(capsys):
    _fit()
    assert "split on feature" not in capsys.readouterr().err


def test_enable_logging_context_manager(capsys):
    with enable_logging(level="DEBUG") as handle:
        _fit()
        assert handle.handler_id is not None
    err = capsys.readouterr().err
    assert "split on feature 0" in err
    assert "fitted tree" in err
    assert handle.handler_id is None

    _fit()
    assert "split on feature" not in capsys.readouterr().err


def test_disable_is_idempotent():
    handle = enable_logging(log_format="full")
    handle.disable()
    handle.disable()
    assert handle.handler_id is None


def test_only_charon_records(capsys):
    with enable_logging(level="INFO"):
        logger.info("from elsewhere")
    assert "from elsewhere" not in capsys.readouterr().err


def test_disabling_one_handle_keeps_the_others_logging(capsys):
    first = enable_logging(level="DEBUG")
    second = enable_logging(level="DEBUG")
    assert LoggingHandle.get_active_handle_count() == 2

    first.disable()
    _fit()
    assert "fitted tree" in capsys.readouterr().err

    second.disable()
    assert LoggingHandle.get_active_handle_count() == 0
    _fit()
    assert "fitted tree" not in capsys.readouterr().err
