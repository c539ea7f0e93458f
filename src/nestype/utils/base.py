"""
Base Classes and Utilities for nestype
Result types and small value helpers
"""

from typing import Callable, Generic, TypeVar, Union
from dataclasses import dataclass
from enum import Enum

# ==================== RESULT TYPES ====================

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class ResultTag(Enum):
    """Result discriminant"""
    OK = "ok"
    ERR = "err"


@dataclass
class Result(Generic[T, E]):
    """Result type: Ok(T) | Err(E)"""
    tag: ResultTag
    value: Union[T, E]

    @classmethod
    def ok(cls, value: T) -> 'Result[T, E]':
        """Create successful result"""
        return cls(ResultTag.OK, value)

    @classmethod
    def err(cls, error: E) -> 'Result[T, E]':
        """Create error result"""
        return cls(ResultTag.ERR, error)

    def is_ok(self) -> bool:
        return self.tag == ResultTag.OK

    def is_err(self) -> bool:
        return self.tag == ResultTag.ERR

    def unwrap(self) -> T:
        """Extract Ok value (re-raises the error if Err)"""
        if self.is_err():
            if isinstance(self.value, BaseException):
                raise self.value
            raise ValueError(f"Called unwrap() on Err: {self.value}")
        return self.value

    def unwrap_err(self) -> E:
        """Extract Err value (throws if Ok)"""
        if self.is_ok():
            raise ValueError(f"Called unwrap_err() on Ok: {self.value}")
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Extract Ok value or return default"""
        return self.value if self.is_ok() else default

    def map(self, func: Callable[[T], U]) -> 'Result[U, E]':
        """Transform Ok value, leave Err unchanged"""
        if self.is_ok():
            return Result.ok(func(self.value))
        return Result.err(self.value)

    def and_then(self, func: Callable[[T], 'Result[U, E]']) -> 'Result[U, E]':
        """Monadic bind - chain operations"""
        if self.is_ok():
            return func(self.value)
        return Result.err(self.value)

    def __str__(self) -> str:
        if self.is_ok():
            return f"Ok({self.value})"
        return f"Err({self.value})"

    def __repr__(self) -> str:
        return self.__str__()
