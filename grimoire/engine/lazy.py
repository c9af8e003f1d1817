"""延迟求值 — 任务字段中「值或生成函数」的统一表示。"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class Lazy(Generic[T]):
    """延迟值：每次使用时调用一次工厂函数。

    引擎在消费点调用 :func:`undelay` 一次并在本次执行中复用结果，
    不会在每次读取时重复求值。
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory

    def resolve(self) -> T:
        return self._factory()

    def __repr__(self) -> str:
        name = getattr(self._factory, "__qualname__", repr(self._factory))
        return f"Lazy({name})"


Delayed = Union[T, Lazy[T]]


def undelay(value: Delayed[T]) -> T:
    """延迟值则求值，否则原样返回。"""
    if isinstance(value, Lazy):
        return value.resolve()
    return value


def delay(value: T | Callable[[], T]) -> Delayed[T]:
    """把可调用对象包装为 :class:`Lazy`，其余值原样返回。"""
    if isinstance(value, Lazy) or not callable(value):
        return value
    return Lazy(value)
