import inspect
from typing import Optional, Iterable, Callable

from ditk import logging


class Registry(dict):
    """
    Overview:
        A helper class for managing registering modules, it extends a dictionary
        and provides a register functions.
    Interfaces:
        ``__init__``, ``register``, ``get``, ``build``, ``query``
    Examples (creating):
        >>> some_registry = Registry({"default": default_module})

    Examples (registering: normal way):
        >>> some_registry.register("sum", Operation(operator.add, 0))

    Examples (registering: decorator way):
        >>> @some_registry.register("sum")
        >>> class SumSegmentTree(SegmentTree):
        >>>     ...

    Examples (accessing):
        >>> f = some_registry["sum"]
    """

    def register(
            self,
            module_name: Optional[str] = None,
            module: Optional[Callable] = None,
            force_overwrite: bool = False
    ) -> Callable:
        """
        Overview:
            Register the module.
        Arguments:
            - module_name (:obj:`Optional[str]`): The name of the module.
            - module (:obj:`Optional[Callable]`): The module to be registered.
            - force_overwrite (:obj:`bool`): Whether to overwrite the module with the same name.
        """
        # used as function call
        if module is not None:
            assert module_name is not None
            Registry._register_generic(self, module_name, module, force_overwrite)
            return

        # used as decorator
        def register_fn(fn: Callable) -> Callable:
            if module_name is None:
                name = fn.__name__
            else:
                name = module_name
            Registry._register_generic(self, name, fn, force_overwrite)
            return fn

        return register_fn

    @staticmethod
    def _register_generic(module_dict: dict, module_name: str, module: Callable, force_overwrite: bool = False) -> None:
        if not force_overwrite:
            assert module_name not in module_dict, module_name
        module_dict[module_name] = module

    def get(self, module_name: str) -> Callable:
        """
        Overview:
            Get the module, raise ``KeyError`` if it is not registered.
        Arguments:
            - module_name (:obj:`str`): The name of the module.
        """
        return self[module_name]

    def build(self, obj_type: str, *obj_args, **obj_kwargs) -> object:
        """
        Overview:
            Build the object registered as ``obj_type`` with the given arguments.
        Arguments:
            - obj_type (:obj:`str`): The type of the object.
            - obj_args (:obj:`Tuple`): The arguments passed to the object.
            - obj_kwargs (:obj:`Dict`): The keyword arguments passed to the object.
        """
        if obj_type not in self:
            raise KeyError("not support buildable-object type: {}".format(obj_type))
        build_fn = self[obj_type]
        try:
            return build_fn(*obj_args, **obj_kwargs)
        except Exception:
            argspec = inspect.getfullargspec(build_fn)
            logging.error(
                'Hint: for {}(alias={})\nExpected args are:\n {}\nGiven arguments keys are:\n{}'.format(
                    build_fn, obj_type, argspec, obj_kwargs.keys()
                )
            )
            raise

    def query(self) -> Iterable:
        """
        Overview:
            all registered module names.
        """
        return self.keys()
