from functools import lru_cache

from ditk import logging


@lru_cache()
def one_time_warning(warning_msg: str) -> None:
    """
    Overview:
        Print warning message only once, repeated messages are ignored.
    Arguments:
        - warning_msg (:obj:`str`): Warning message.
    """
    logging.warning(warning_msg)
