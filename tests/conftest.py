import logging
from logging.handlers import RotatingFileHandler

import pytest


@pytest.fixture(autouse=True)
def reset_root_logging():
    # App startup installs console/file handlers on the root logger; drop them.
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
