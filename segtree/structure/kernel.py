"""
Build, update and reduce routines over the flat segment tree buffer.

The buffer holds ``2 * size`` slots: leaves live in ``[size, 2 * size)`` and the parent of slot ``i`` is ``i >> 1``.
Functions without suffix take the binary operation as a python callable and work on any indexable buffer; the
``*_kernel`` variants take a registered operation name and are compiled by numba for ndarray buffers.
"""
from typing import Any, Callable, MutableSequence

import numpy as np

from segtree.utils import njit


def build(tree: MutableSequence, size: int, fn: Callable) -> None:
    # Children always have larger indices, so one descending pass is enough.
    for idx in range(size - 1, 0, -1):
        tree[idx] = fn(tree[2 * idx], tree[2 * idx + 1])


def setitem(tree: MutableSequence, idx: int, val: Any, fn: Callable) -> None:
    # New values from specified node to the root node are all computed before the first write,
    # so an exception raised by ``fn`` leaves the tree untouched.
    new_values = [(idx, val)]
    while idx > 1:
        if idx & 1:
            val = fn(tree[idx - 1], val)
        else:
            val = fn(val, tree[idx + 1])
        idx = idx >> 1
        new_values.append((idx, val))
    for pos, new_val in new_values:
        tree[pos] = new_val


def reduce(tree: MutableSequence, start: int, end: int, fn: Callable) -> Any:
    # Nodes in [start, end) will be aggregated, caller guarantees start < end.
    # Partial results are only created from real nodes, so ``fn`` needs no identity element.
    has_left, has_right = False, False
    left_result, right_result = None, None
    while start < end:
        if start & 1:
            # tree[start] is a right child, its parent also covers tree[start - 1], so consume it now
            left_result = fn(left_result, tree[start]) if has_left else tree[start]
            has_left = True
            start += 1
        if end & 1:
            # tree[end - 1] is a left child, its parent also covers tree[end], so consume it now
            end -= 1
            right_result = fn(tree[end], right_result) if has_right else tree[end]
            has_right = True
        # Both start and end transform to respective parent node
        start = start >> 1
        end = end >> 1
    if not has_left:
        return right_result
    if not has_right:
        return left_result
    return fn(left_result, right_result)


def find_prefixsum_idx(tree: MutableSequence, capacity: int, prefixsum: float, neutral_element: Any) -> int:
    # The function is to find a leaf index which satisfies:
    # sum(leaf[:idx]) <= prefixsum < sum(leaf[:idx + 1]), it only holds for a perfect tree (power of 2 capacity).
    idx = 1  # start from root node
    while idx < capacity:
        child_base = 2 * idx
        if tree[child_base] > prefixsum:
            idx = child_base
        else:
            prefixsum -= tree[child_base]
            idx = child_base + 1
    # Special case: the last leaves are neutral_element(0) and caller wants ``find_prefixsum_idx(total)``,
    # walk back to the last non-zero leaf.
    if idx == 2 * capacity - 1 and tree[idx] == neutral_element:
        while idx > capacity and tree[idx] == neutral_element:
            idx -= 1
        if tree[idx] == neutral_element:
            raise ValueError("All elements in tree are the neutral_element(0), can't find non-zero element")
    return idx - capacity


@njit()
def apply_kernel(left, right, operation: str):
    if operation == 'sum':
        return left + right
    elif operation == 'prod':
        return left * right
    elif operation == 'min':
        return left if left < right else right
    else:
        return left if left > right else right


@njit()
def build_kernel(tree: np.ndarray, size: int, operation: str) -> None:
    for idx in range(size - 1, 0, -1):
        tree[idx] = apply_kernel(tree[2 * idx], tree[2 * idx + 1], operation)


@njit()
def setitem_kernel(tree: np.ndarray, idx: int, val, operation: str) -> None:
    tree[idx] = val
    while idx > 1:
        if idx & 1:
            tree[idx >> 1] = apply_kernel(tree[idx - 1], tree[idx], operation)
        else:
            tree[idx >> 1] = apply_kernel(tree[idx], tree[idx + 1], operation)
        idx = idx >> 1


@njit()
def reduce_kernel(tree: np.ndarray, start: int, end: int, operation: str):
    has_left, has_right = False, False
    left_result, right_result = tree[start], tree[start]
    while start < end:
        if start & 1:
            if has_left:
                left_result = apply_kernel(left_result, tree[start], operation)
            else:
                left_result = tree[start]
                has_left = True
            start += 1
        if end & 1:
            end -= 1
            if has_right:
                right_result = apply_kernel(tree[end], right_result, operation)
            else:
                right_result = tree[end]
                has_right = True
        start = start >> 1
        end = end >> 1
    if not has_left:
        return right_result
    if not has_right:
        return left_result
    return apply_kernel(left_result, right_result, operation)


find_prefixsum_idx_kernel = njit()(find_prefixsum_idx)
