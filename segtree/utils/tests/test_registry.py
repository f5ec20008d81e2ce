import pytest
from segtree.utils.registry import Registry


@pytest.mark.unittest
def test_registry():
    TEST_REGISTRY = Registry()

    @TEST_REGISTRY.register('a')
    class A:
        pass

    instance = TEST_REGISTRY.build('a')
    assert isinstance(instance, A)

    with pytest.raises(AssertionError):

        @TEST_REGISTRY.register('a')
        class A1:
            pass

    @TEST_REGISTRY.register('a', force_overwrite=True)
    class A2:
        pass

    instance = TEST_REGISTRY.build('a')
    assert isinstance(instance, A2)

    @TEST_REGISTRY.register()
    def b(x, y=1):
        return x + y

    assert TEST_REGISTRY.get('b') is b
    assert TEST_REGISTRY.build('b', 1, y=2) == 3
    assert list(TEST_REGISTRY.query()) == ['a', 'b']

    TEST_REGISTRY.register('c', max)
    assert TEST_REGISTRY.build('c', 1, 5) == 5

    with pytest.raises(KeyError):
        TEST_REGISTRY.build('d')
    with pytest.raises(TypeError):
        TEST_REGISTRY.build('b', 1, z=2)
