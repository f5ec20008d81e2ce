import math
import operator
from collections import namedtuple
from typing import Any, Callable, Optional, Tuple, Union

from segtree.utils import OPERATION_REGISTRY

Operation = namedtuple('Operation', ['fn', 'neutral_element'])

# Operations with a numba kernel, dispatched by name inside ``kernel.py``.
KERNEL_OPERATIONS = ('sum', 'prod', 'min', 'max')

OPERATION_REGISTRY.register('sum', Operation(operator.add, 0))
OPERATION_REGISTRY.register('prod', Operation(operator.mul, 1))
OPERATION_REGISTRY.register('min', Operation(min, math.inf))
OPERATION_REGISTRY.register('max', Operation(max, -math.inf))
OPERATION_REGISTRY.register('gcd', Operation(math.gcd, 0))
OPERATION_REGISTRY.register('xor', Operation(operator.xor, 0))


def resolve_operation(operation: Union[str, Callable],
                      neutral_element: Optional[Any] = None) -> Tuple[Callable, Optional[Any]]:
    """
    Overview:
        Turn the ``operation`` argument of a segment tree into a binary function and its neutral element.
    Arguments:
        - operation (:obj:`str` or :obj:`Callable`): A name registered in ``OPERATION_REGISTRY`` or an \
            associative binary function.
        - neutral_element (:obj:`Any`): Explicit neutral element, overrides the registered one.
    Returns:
        - fn (:obj:`Callable`): The binary function.
        - neutral_element (:obj:`Any`): The neutral element, ``None`` if unknown.
    """
    if isinstance(operation, str):
        if operation not in OPERATION_REGISTRY:
            raise ValueError(
                "operation argument should be in {} or a callable, but got {}".format(
                    list(OPERATION_REGISTRY.query()), operation
                )
            )
        registered = OPERATION_REGISTRY.get(operation)
        if neutral_element is None:
            neutral_element = registered.neutral_element
        return registered.fn, neutral_element
    if not callable(operation):
        raise TypeError("operation should be str or callable, but got {}".format(type(operation)))
    return operation, neutral_element
