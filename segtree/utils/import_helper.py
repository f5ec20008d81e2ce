import importlib
from functools import partial, lru_cache
from typing import Callable, List

import segtree
from .default_helper import one_time_warning

# numba releases before this minor version cannot compile the kernels
MIN_NUMBA_MINOR_VERSION = 53


def try_import_numba():
    """
    Overview:
        Try import numba module, if failed, return ``None``

    Returns:
        - (:obj:`Module`): Imported module, or ``None`` when numba not found or too old
    """
    try:
        import numba
    except ImportError:
        one_time_warning("If you want to use numba to speed up segment tree, please install numba first")
        return None
    middle_version = numba.__version__.split(".")[1]
    if numba.__version__.startswith('0.') and int(middle_version) < MIN_NUMBA_MINOR_VERSION:
        one_time_warning(
            "Due to your numba version < 0.53.0, segtree disables it. And you can install "
            "numba>=0.53.0 if you want to speed up the segment tree kernels"
        )
        return None
    return numba


@lru_cache()
def njit() -> Callable:
    """
    Overview:
        Return the decorator used to compile segment tree kernels. It is ``numba.njit`` when numba is enabled \
        and importable, otherwise ``functools.partial``, which leaves the decorated function as plain python.
    Returns:
        - decorator (:obj:`Callable`): The kernel decorator.
    """
    if not segtree.enable_numba:
        return partial
    numba = try_import_numba()
    if numba is None:
        return partial
    return numba.njit


def import_module(modules: List[str]) -> None:
    """
    Overview:
        Import several module as a list
    Arguments:
        - (:obj:`str list`): List of module names
    """
    for name in modules:
        importlib.import_module(name)
