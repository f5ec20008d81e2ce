import pytest

from segtree.utils.default_helper import one_time_warning


@pytest.mark.unittest
def test_one_time_warning():
    one_time_warning.cache_clear()
    one_time_warning('test_one_time_warning')
    one_time_warning('test_one_time_warning')
    info = one_time_warning.cache_info()
    assert info.misses == 1
    assert info.hits == 1
