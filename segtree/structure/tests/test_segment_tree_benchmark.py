import random
import time

import numpy as np
import pytest

import segtree
segtree.enable_numba = False  # noqa
from segtree.structure import SegmentTree  # noqa


@pytest.mark.benchmark
@pytest.mark.parametrize('dtype', [None, np.float64])
def test_update_query_time(dtype):
    random.seed(0)
    size = 2 ** 14 + 3
    elements = [random.random() for _ in range(size)]
    tree = SegmentTree(elements, dtype=dtype)
    t0 = time.time()
    for _ in range(2000):
        idx = random.randrange(size)
        elements[idx] = random.random()
        tree.update(idx, elements[idx])
        left = random.randrange(size)
        right = random.randrange(left, size + 1)
        assert tree.query(left, right) == pytest.approx(sum(elements[left:right]))
    print('dtype: {}, 2000 update+query with size {}: {:.3f}s'.format(dtype, size, time.time() - t0))
