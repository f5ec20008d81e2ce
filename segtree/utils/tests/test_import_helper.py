import pytest

from segtree.utils.import_helper import try_import_numba, njit, import_module


@pytest.mark.unittest
def test_try_import():
    numba = try_import_numba()
    assert numba is None or hasattr(numba, 'njit')
    import_module(['segtree.utils'])


@pytest.mark.unittest
def test_njit():

    def add(a, b):
        return a + b

    decorator = njit()
    assert decorator is njit()
    assert decorator(add)(1, 2) == 3
