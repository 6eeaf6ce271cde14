import logging
from typing import Union

from rich.logging import RichHandler


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    root = logging.getLogger()
    # replace any handler from an earlier call instead of stacking them
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(RichHandler(rich_tracebacks=True, show_path=False))
    root.setLevel(level)
    return root
