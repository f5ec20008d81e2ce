from .registry import Registry

OPERATION_REGISTRY = Registry()
SEGMENT_TREE_REGISTRY = Registry()

registries = {
    'operation': OPERATION_REGISTRY,
    'segment_tree': SEGMENT_TREE_REGISTRY,
}
