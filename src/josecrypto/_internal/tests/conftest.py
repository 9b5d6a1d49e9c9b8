import logging

import pytest


@pytest.fixture(autouse=True)
def debug_logging(caplog):
    # josecrypto only ever logs at DEBUG
    caplog.set_level(logging.DEBUG, logger='josecrypto')
    yield caplog
