from .default_helper import one_time_warning
from .import_helper import try_import_numba, njit, import_module
from .registry import Registry
from .registry_factory import registries, OPERATION_REGISTRY, SEGMENT_TREE_REGISTRY
