import math
import operator

import numpy as np
import pytest
from easydict import EasyDict

import segtree
segtree.enable_numba = False  # noqa
from segtree.structure import SegmentTree, SumSegmentTree, MinSegmentTree, MaxSegmentTree, Operation, \
    create_segment_tree, get_segment_tree_cls, resolve_operation  # noqa
from segtree.utils import OPERATION_REGISTRY  # noqa


@pytest.mark.unittest
class TestSegmentTreeConfig:

    def test_default_config(self):
        cfg = SegmentTree.default_config()
        assert isinstance(cfg, EasyDict)
        assert cfg.cfg_type == 'SegmentTreeDict'
        assert cfg.type == 'base'
        assert cfg.operation == 'sum'
        assert cfg.neutral_element is None and cfg.dtype is None
        cfg.operation = 'min'
        assert SegmentTree.config['operation'] == 'sum'
        assert SumSegmentTree.default_config().cfg_type == 'SumSegmentTreeDict'

    def test_get_segment_tree_cls(self):
        assert get_segment_tree_cls(EasyDict(type='base')) is SegmentTree
        assert get_segment_tree_cls(EasyDict(type='sum')) is SumSegmentTree
        assert get_segment_tree_cls(EasyDict(type='min', import_names=['segtree.structure'])) is MinSegmentTree
        assert get_segment_tree_cls(EasyDict(type='max')) is MaxSegmentTree
        with pytest.raises(KeyError):
            get_segment_tree_cls(EasyDict(type='avl'))

    def test_create_segment_tree(self):
        tree = create_segment_tree(dict(type='min'), [3, 1, 2])
        assert isinstance(tree, MinSegmentTree)
        assert tree.min() == 1

        tree = create_segment_tree(dict(type='base', operation='max', dtype='int64'), [3, 9, 2])
        assert type(tree) is SegmentTree
        assert tree.dtype == np.int64
        assert tree.query(0, 3) == 9

        tree = create_segment_tree(dict(type='base', operation=operator.add, neutral_element=''), ['a', 'b'])
        assert tree.query(0, 2) == 'ab'
        assert tree.query(1, 1) == ''

        tree = create_segment_tree(dict(type='sum'))
        assert tree.empty

        with pytest.raises(KeyError):
            create_segment_tree(dict(type='avl'), [1])
        with pytest.raises(TypeError):
            create_segment_tree(dict(type='sum', operation='min'), [1])


@pytest.mark.unittest
class TestOperation:

    def test_registered(self):
        for name in ['sum', 'prod', 'min', 'max', 'gcd', 'xor']:
            assert name in OPERATION_REGISTRY.query()
            assert isinstance(OPERATION_REGISTRY.get(name), Operation)

    def test_resolve_operation(self):
        assert resolve_operation('sum') == (operator.add, 0)
        assert resolve_operation('min') == (min, math.inf)
        assert resolve_operation('min', -1) == (min, -1)
        assert resolve_operation(operator.mul) == (operator.mul, None)
        assert resolve_operation(operator.mul, 1) == (operator.mul, 1)
        with pytest.raises(ValueError):
            resolve_operation('mean')
        with pytest.raises(TypeError):
            resolve_operation(None)

    def test_register_new_operation(self):
        OPERATION_REGISTRY.register('test_or', Operation(operator.or_, 0))
        tree = SegmentTree([1, 2, 4, 8], operation='test_or')
        assert tree.query(1, 3) == 6
        assert tree.query(2, 2) == 0
        assert not SegmentTree([1, 2], operation='test_or', dtype=np.int64)._use_kernel
        with pytest.raises(AssertionError):
            OPERATION_REGISTRY.register('test_or', Operation(operator.and_, -1))
        OPERATION_REGISTRY.register('test_or', Operation(operator.and_, -1), force_overwrite=True)
        assert SegmentTree([7, 6], operation='test_or').reduce() == 6
        OPERATION_REGISTRY.pop('test_or')
