from .operation import Operation, KERNEL_OPERATIONS, resolve_operation
from .segment_tree import SegmentTree, SumSegmentTree, MinSegmentTree, MaxSegmentTree, ElementReference, \
    SegmentTreeIndexError, swap, create_segment_tree, get_segment_tree_cls
