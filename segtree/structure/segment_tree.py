import copy
import operator
import weakref
from typing import Any, Callable, Iterable, Iterator, Optional, Union

import numpy as np
from ditk import logging
from easydict import EasyDict

from segtree.utils import SEGMENT_TREE_REGISTRY, import_module
from . import kernel
from .operation import KERNEL_OPERATIONS, resolve_operation


class SegmentTreeIndexError(IndexError):
    """
    Overview:
        Raised by the checked interfaces (``at``, ``update``, ``query``, ``reference``) when an index or an \
        interval falls outside the tree.
    """

    def __init__(self, subscript: Any, size: int) -> None:
        super(SegmentTreeIndexError, self).__init__(
            "SegmentTree: subscript out of range, got {} with size {}".format(subscript, size)
        )
        self.subscript = subscript
        self.size = size


class ElementReference:
    """
    Overview:
        Handle of one leaf of a segment tree. Reading gives the current leaf value and writing goes through \
        ``SegmentTree.update``, so the tree invariant is always kept. The tree is only weakly referenced: \
        the handle does not keep it alive and raises ``ReferenceError`` once the tree is gone.
    Interface:
        ``get``, ``set``, ``value``, ``index``
    """

    def __init__(self, tree: 'SegmentTree', idx: int) -> None:
        self._parent = weakref.ref(tree)
        self._index = idx

    @property
    def index(self) -> int:
        return self._index

    def _tree(self) -> 'SegmentTree':
        tree = self._parent()
        if tree is None:
            raise ReferenceError("the segment tree of element {} no longer exists".format(self._index))
        return tree

    def get(self) -> Any:
        return self._tree().at(self._index)

    def set(self, value: Any) -> None:
        self._tree().update(self._index, value)

    value = property(get, set)

    def __repr__(self) -> str:
        return 'ElementReference(index={})'.format(self._index)


@SEGMENT_TREE_REGISTRY.register('base')
class SegmentTree:
    """
    Overview:
        Segment tree data structure, implemented by the tree-like array. Only the leaf nodes are real value,
        non-leaf nodes are the result of ``operation`` on its left and right child.
        Index 1 is the root; Index ranging in [size, 2 * size - 1] are the leaf nodes.
        For each parent node with index i, left child is value[2*i] and right child is value[2*i+1].
        ``operation`` must be associative, it need not be commutative: partial results are always combined in
        leaf order.
        Every access comes in two flavours, an unchecked one (``[]``, ``reduce``) which only asserts the range, and
        a checked one (``at``, ``update``, ``query``) which raises ``SegmentTreeIndexError``.
        Concurrent use needs external locking: an ``update`` must not overlap any other call on the same tree.
    Interface:
        ``__init__``, ``reduce``, ``query``, ``update``, ``at``, ``reference``, ``__setitem__``, ``__getitem__``, \
        ``swap``, ``copy``
    """
    config = dict(
        type='base',
        # Name in ``OPERATION_REGISTRY`` or an associative binary callable.
        operation='sum',
        # Result of an empty range query, ``None`` means the registered one (if any).
        neutral_element=None,
        # ``None`` stores leaves in a python list, otherwise in a numpy array of this dtype.
        dtype=None,
    )

    @classmethod
    def default_config(cls: type) -> EasyDict:
        cfg = EasyDict(copy.deepcopy(cls.config))
        cfg.cfg_type = cls.__name__ + 'Dict'
        return cfg

    def __init__(
            self,
            data: Iterable = (),
            operation: Union[str, Callable] = 'sum',
            neutral_element: Optional[Any] = None,
            dtype: Optional[Union[str, np.dtype, type]] = None
    ) -> None:
        """
        Overview:
            Initialize the segment tree with the leaves in ``data`` and build all the non-leaf nodes.
        Arguments:
            - data (:obj:`Iterable`): The leaf values in order, its length is the fixed size of the tree.
            - operation (:obj:`str` or :obj:`Callable`): The operation to construct the tree, either a name \
                registered in ``OPERATION_REGISTRY`` (sum, prod, min, max, gcd, xor) or an associative function.
            - neutral_element (:obj:`Any`): The value returned by an empty range query, default to the \
                registered neutral element of ``operation`` or ``None`` for a plain function.
            - dtype (:obj:`str` or :obj:`np.dtype`): If given, leaves are stored in a numpy array of this dtype, \
                and sum, prod, min, max run in numba kernels. Fixed-width string dtypes (``U``, ``S``) are \
                rejected, internal nodes share the leaf dtype and would truncate the aggregates.
        """
        self._operation = operation
        self._fn, self._neutral_element = resolve_operation(operation, neutral_element)
        if dtype is None:
            leaves = list(data)
            size = len(leaves)
            self._value = [self._neutral_element] * size + leaves
        else:
            if np.dtype(dtype).kind in 'US':
                raise ValueError("fixed-width string dtype {} is not supported, use dtype=None".format(dtype))
            if not isinstance(data, np.ndarray):
                data = list(data)
            leaves = np.asarray(data, dtype=dtype)
            if leaves.ndim != 1:
                raise ValueError("segment tree leaves should be 1-dim, but got shape {}".format(leaves.shape))
            size = leaves.shape[0]
            self._value = np.zeros(2 * size, dtype=leaves.dtype)
            self._value[size:] = leaves
        self._use_kernel = (
            isinstance(self._value, np.ndarray) and isinstance(operation, str) and operation in KERNEL_OPERATIONS
            and self._value.dtype.kind in 'iuf'
        )
        if self._use_kernel:
            self._compile()
            kernel.build_kernel(self._value, size, operation)
        else:
            kernel.build(self._value, size, self._fn)
        logging.debug(
            'build {} with size {}, backend {}'.format(
                self, size, 'kernel' if self._use_kernel else type(self._value).__name__
            )
        )

    @property
    def size(self) -> int:
        return len(self._value) // 2

    @property
    def empty(self) -> bool:
        return len(self._value) == 0

    @property
    def operation(self) -> Union[str, Callable]:
        return self._operation

    @property
    def neutral_element(self) -> Any:
        return self._neutral_element

    @property
    def dtype(self) -> Optional[np.dtype]:
        return self._value.dtype if isinstance(self._value, np.ndarray) else None

    @property
    def buffer(self) -> Union[tuple, np.ndarray]:
        """
        Overview:
            Read-only view of the whole ``2 * size`` buffer, slot 0 is unused.
        """
        if isinstance(self._value, np.ndarray):
            view = self._value.view()
            view.flags.writeable = False
            return view
        return tuple(self._value)

    def __len__(self) -> int:
        return self.size

    def _check_index(self, idx: int) -> int:
        idx = operator.index(idx)
        if not 0 <= idx < self.size:
            raise SegmentTreeIndexError(idx, self.size)
        return idx

    def _check_range(self, left: int, right: int) -> None:
        left, right = operator.index(left), operator.index(right)
        if not 0 <= left <= right <= self.size:
            raise SegmentTreeIndexError((left, right), self.size)

    def reduce(self, start: int = 0, end: Optional[int] = None) -> Any:
        """
        Overview:
            Reduce the tree in range ``[start, end)``, without bounds check.
        Arguments:
            - start (:obj:`int`): Start index(relative index, the first leaf node is 0), default set to 0
            - end (:obj:`int` or :obj:`None`): End index(relative index), default set to ``self.size``
        Returns:
            - reduce_result (:obj:`Any`): The reduce result value, ``neutral_element`` for an empty range
        """
        if end is None:
            end = self.size
        assert 0 <= start <= end <= self.size, (start, end)
        return self._reduce(start, end)

    def query(self, left: int, right: int) -> Any:
        """
        Overview:
            Reduce the tree in range ``[left, right)``, i.e. ``op(...op(op(leaf[left], leaf[left+1]), ...)``.
        Arguments:
            - left (:obj:`int`): Start index, ``0 <= left <= right``.
            - right (:obj:`int`): End index(exclusive), ``right <= size``.
        Returns:
            - reduce_result (:obj:`Any`): The reduce result value, ``neutral_element`` for an empty range
        Raises:
            - SegmentTreeIndexError: If ``[left, right)`` is not a valid range of the tree.
        """
        self._check_range(left, right)
        return self._reduce(left, right)

    def _reduce(self, start: int, end: int) -> Any:
        if start == end:
            return self._neutral_element
        # Change to absolute leaf index by adding size.
        start += self.size
        end += self.size
        if self._use_kernel:
            return kernel.reduce_kernel(self._value, start, end, self._operation)
        return kernel.reduce(self._value, start, end, self._fn)

    def update(self, idx: int, val: Any) -> None:
        """
        Overview:
            Set ``leaf[idx] = val``; Then update the related nodes.
        Arguments:
            - idx (:obj:`int`): Leaf node index(relative index), ``0 <= idx < size``.
            - val (:obj:`Any`): The value that will be assigned to ``leaf[idx]``.
        Raises:
            - SegmentTreeIndexError: If ``idx`` is out of range, the tree is left untouched.
        """
        idx = self._check_index(idx)
        self._setitem(idx, val)

    def __setitem__(self, idx: int, val: Any) -> None:
        """
        Overview:
            Same as ``update`` but only asserts the range of ``idx``.
        """
        assert 0 <= idx < self.size, idx
        self._setitem(idx, val)

    def _setitem(self, idx: int, val: Any) -> None:
        # ``idx`` should add ``size`` to change to absolute index.
        if self._use_kernel:
            kernel.setitem_kernel(self._value, idx + self.size, self._value.dtype.type(val), self._operation)
        elif isinstance(self._value, np.ndarray):
            # Cast first, ancestors must be computed from the value the leaf will actually hold.
            kernel.setitem(self._value, idx + self.size, self._value.dtype.type(val), self._fn)
        else:
            kernel.setitem(self._value, idx + self.size, val, self._fn)

    def __getitem__(self, idx: int) -> Any:
        """
        Overview:
            Get ``leaf[idx]``, only asserts the range of ``idx``.
        """
        assert 0 <= idx < self.size, idx
        return self._value[idx + self.size]

    def at(self, idx: int) -> Any:
        """
        Overview:
            Get ``leaf[idx]``, raise ``SegmentTreeIndexError`` if ``idx`` is out of range.
        """
        idx = self._check_index(idx)
        return self._value[idx + self.size]

    def reference(self, idx: int) -> ElementReference:
        """
        Overview:
            Get a writable handle of ``leaf[idx]``, assignment through it is the same as ``update``. \
            The handle must not be used after the tree is released.
        """
        idx = self._check_index(idx)
        return ElementReference(self, idx)

    def __iter__(self) -> Iterator:
        size = self.size
        for idx in range(size, 2 * size):
            yield self._value[idx]

    def __reversed__(self) -> Iterator:
        size = self.size
        for idx in range(2 * size - 1, size - 1, -1):
            yield self._value[idx]

    def swap(self, other: 'SegmentTree') -> None:
        """
        Overview:
            Exchange the whole state (buffer, operation, neutral element, storage) with ``other`` in O(1).
        Arguments:
            - other (:obj:`SegmentTree`): The tree of the same class to swap with.
        """
        if type(other) is not type(self):
            raise TypeError("can only swap with {}, but got {}".format(type(self).__name__, type(other).__name__))
        self.__dict__, other.__dict__ = other.__dict__, self.__dict__

    def copy(self) -> 'SegmentTree':
        """
        Overview:
            Return an independent tree with a copied buffer, the operation is shared and nothing is rebuilt.
        """
        new_tree = self.__class__.__new__(self.__class__)
        new_tree.__dict__.update(self.__dict__)
        new_tree._value = self._value.copy()
        return new_tree

    def __copy__(self) -> 'SegmentTree':
        return self.copy()

    def __repr__(self) -> str:
        if isinstance(self._operation, str):
            name = self._operation
        else:
            name = getattr(self._operation, '__name__', repr(self._operation))
        return "{}(size={}, operation='{}')".format(type(self).__name__, self.size, name)

    def _compile(self) -> None:
        f64 = np.array([0, 1], dtype=np.float64)
        f32 = np.array([0, 1], dtype=np.float32)
        i64 = np.array([0, 1], dtype=np.int64)
        for d in [f64, f32, i64]:
            kernel.build_kernel(d, 1, 'sum')
            kernel.setitem_kernel(d, 1, d.dtype.type(3), 'sum')
            kernel.reduce_kernel(d, 1, 2, 'min')
            kernel.find_prefixsum_idx_kernel(d, 1, 0.5, d.dtype.type(0))


@SEGMENT_TREE_REGISTRY.register('sum')
class SumSegmentTree(SegmentTree):
    config = dict(
        type='sum',
        neutral_element=None,
        dtype=None,
    )

    def __init__(self, data: Iterable = (), neutral_element: Optional[Any] = None, dtype: Optional[Any] = None) -> None:
        """
        Overview:
            Init sum segment tree by passing ``operation='sum'``
        """
        super(SumSegmentTree, self).__init__(data, operation='sum', neutral_element=neutral_element, dtype=dtype)

    def sum(self, start: int = 0, end: Optional[int] = None) -> Any:
        return self.reduce(start, end)

    def find_prefixsum_idx(self, prefixsum: float, trust_caller: bool = True) -> int:
        """
        Overview:
            Find the highest non-zero index i, sum_{j}leaf[j] <= ``prefixsum`` (where 0 <= j < i)
            and sum_{j}leaf[j] > ``prefixsum`` (where 0 <= j < i+1). Leaves should be non-negative.
        Arguments:
            - prefixsum (:obj:`float`): The target prefixsum.
            - trust_caller (:obj:`bool`): Whether to trust caller, which means whether to check whether \
                this tree's sum is greater than the input ``prefixsum`` by calling ``reduce`` function.
                Default set to True.
        Returns:
            - idx (:obj:`int`): Eligible index.
        """
        if not trust_caller:
            assert 0 <= prefixsum <= self.reduce() + 1e-5, prefixsum
        size = self.size
        if size == 0:
            raise ValueError("can't find prefixsum index in an empty tree")
        if size & (size - 1) == 0:
            # A power of 2 size makes a perfect tree, so we can descend from the root.
            if self._use_kernel:
                return kernel.find_prefixsum_idx_kernel(
                    self._value, size, float(prefixsum), self._value.dtype.type(self._neutral_element)
                )
            return kernel.find_prefixsum_idx(self._value, size, prefixsum, self._neutral_element)
        return self._bisect_prefixsum_idx(prefixsum)

    def _bisect_prefixsum_idx(self, prefixsum: float) -> int:
        # Smallest idx with sum(leaf[:idx + 1]) > prefixsum.
        low, high = 0, self.size
        while low < high:
            mid = (low + high) // 2
            if self._reduce(0, mid + 1) > prefixsum:
                high = mid
            else:
                low = mid + 1
        if low == self.size:
            low = self.size - 1
            while low > 0 and self._value[low + self.size] == self._neutral_element:
                low -= 1
            if self._value[low + self.size] == self._neutral_element:
                raise ValueError("All elements in tree are the neutral_element(0), can't find non-zero element")
        return low


@SEGMENT_TREE_REGISTRY.register('min')
class MinSegmentTree(SegmentTree):
    config = dict(
        type='min',
        neutral_element=None,
        dtype=None,
    )

    def __init__(self, data: Iterable = (), neutral_element: Optional[Any] = None, dtype: Optional[Any] = None) -> None:
        """
        Overview:
            Init min segment tree by passing ``operation='min'``
        """
        super(MinSegmentTree, self).__init__(data, operation='min', neutral_element=neutral_element, dtype=dtype)

    def min(self, start: int = 0, end: Optional[int] = None) -> Any:
        return self.reduce(start, end)


@SEGMENT_TREE_REGISTRY.register('max')
class MaxSegmentTree(SegmentTree):
    config = dict(
        type='max',
        neutral_element=None,
        dtype=None,
    )

    def __init__(self, data: Iterable = (), neutral_element: Optional[Any] = None, dtype: Optional[Any] = None) -> None:
        """
        Overview:
            Init max segment tree by passing ``operation='max'``
        """
        super(MaxSegmentTree, self).__init__(data, operation='max', neutral_element=neutral_element, dtype=dtype)

    def max(self, start: int = 0, end: Optional[int] = None) -> Any:
        return self.reduce(start, end)


def swap(lhs: SegmentTree, rhs: SegmentTree) -> None:
    lhs.swap(rhs)


def get_segment_tree_cls(cfg: EasyDict) -> type:
    r"""
    Overview:
        Get a segment tree class according to cfg.
    Arguments:
        - cfg (:obj:`EasyDict`): Segment tree config.
    ArgumentsKeys:
        - necessary: `type`
    """
    import_module(cfg.get('import_names', []))
    return SEGMENT_TREE_REGISTRY.get(cfg.type)


def create_segment_tree(cfg: dict, data: Iterable = ()) -> SegmentTree:
    r"""
    Overview:
        Create a segment tree according to cfg, missing keys are filled by the default config of its class.
    Arguments:
        - cfg (:obj:`dict`): Segment tree config.
        - data (:obj:`Iterable`): The leaf values.
    ArgumentsKeys:
        - necessary: `type`
    """
    cfg = EasyDict(cfg)
    tree_cls = get_segment_tree_cls(cfg)
    merged_cfg = tree_cls.default_config()
    merged_cfg.update(cfg)
    kwargs = {k: v for k, v in merged_cfg.items() if k not in ('type', 'cfg_type', 'import_names')}
    return SEGMENT_TREE_REGISTRY.build(cfg.type, data, **kwargs)
