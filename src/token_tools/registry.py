"""
Registry pattern utility for creating type registries.

This module provides the ``new_registry`` function which creates a registry
dictionary and a decorator for registering handlers. The pattern is used for
the filter operations of the adjustment pipeline and for the outline
generators shared by rim patterns and shape layers.

Usage example::

    from token_tools.registry import new_registry

    OUTLINES, register = new_registry(attribute='kind')

    @register('stripe')
    def stripe_outline(size):
        ...

    outline = OUTLINES['stripe'](12.0)
"""

from typing import Any, Callable, Tuple, TypeVar, Union

T = TypeVar("T")


def new_registry(attribute: Union[str, None] = None) -> Tuple[dict, Callable]:
    """
    Returns an empty dict and a @register decorator.

    :param attribute: Optional attribute name to set on registered objects.
                     The key will be stored as this attribute on the object.
    :return: Tuple of (registry_dict, register_decorator)
    """
    registry = {}

    def register(key: Any) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            registry[key] = func
            if attribute:
                setattr(func, attribute, key)
            return func

        return decorator

    return registry, register
