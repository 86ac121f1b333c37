"""Lazy proxy used for the module-level ``settings`` and ``client`` singletons."""

import threading
import typing as t


ProxyObjT = t.TypeVar('ProxyObjT')

empty = object()

__all__ = ["ProxyObject"]


def new_method_proxy(func: t.Callable[..., t.Any]) -> t.Callable[..., t.Any]:
    """Return a wrapper that forwards calls to the proxied object."""

    def inner(self: 'ProxyObject', *args: t.Any):
        if self._wrapped is empty:
            self._setup()
        return func(self._wrapped, *args)
    return inner


class ProxyObject(t.Generic[ProxyObjT]):
    """
    Defers building an object until an attribute is first accessed

    >>> client = ProxyObject(obj_getter = get_client)
    >>> client.zones.list_all()  # `get_client()` runs here
    """

    _wrapped = None

    if t.TYPE_CHECKING:
        def __new__(cls: t.Type[ProxyObjT], *args, **kwargs) -> ProxyObjT:
            ...

    def __init__(
        self,
        obj_cls: t.Optional[t.Type[ProxyObjT]] = None,
        obj_getter: t.Optional[t.Callable[..., ProxyObjT]] = None,
        obj_kwargs: t.Optional[t.Dict[str, t.Any]] = None,
    ) -> ProxyObjT:
        assert obj_cls or obj_getter, "Either `obj_cls` or `obj_getter` must be provided"
        self.__dict__['_wrapped'] = empty
        self.__dict__['__obj_cls_'] = obj_cls
        self.__dict__['__obj_getter_'] = obj_getter
        self.__dict__['__obj_kwargs_'] = obj_kwargs or {}
        self.__dict__['__threadlock_'] = threading.RLock()

    __getattr__ = new_method_proxy(getattr)

    def __setattr__(self, name, value):
        if name == "_wrapped":
            self.__dict__["_wrapped"] = value
        else:
            if self._wrapped is empty:
                self._setup()
            setattr(self._wrapped, name, value)

    def __delattr__(self, name):
        if name == "_wrapped":
            raise TypeError("can't delete _wrapped.")
        if self._wrapped is empty:
            self._setup()
        delattr(self._wrapped, name)

    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:
        if self._wrapped is empty:
            self._setup()
        return self._wrapped(*args, **kwargs)

    def _setup(self) -> None:
        """Instantiate the wrapped object if it isn't available."""
        with self.__dict__['__threadlock_']:
            if self.__dict__['_wrapped'] is not empty:
                return
            builder = self.__dict__['__obj_getter_'] or self.__dict__['__obj_cls_']
            self.__dict__['_wrapped'] = builder(**self.__dict__['__obj_kwargs_'])

    @property
    def is_initialized(self) -> bool:
        """Returns whether the wrapped object has been built"""
        return self.__dict__['_wrapped'] is not empty

    __str__ = new_method_proxy(str)
    __bool__ = new_method_proxy(bool)
    __dir__ = new_method_proxy(dir)
    __repr__ = new_method_proxy(repr)
