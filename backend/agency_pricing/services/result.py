"""Result values returned across store boundaries instead of raising."""
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class StoreError(Exception):
    """Base for failures reported through Result.error."""


class PersistenceError(StoreError):
    """The database rejected or could not complete an operation."""


class NotFoundError(StoreError):
    pass


class ValidationError(StoreError):
    """Write refused by a business rule (duplicate, protected record...)."""


class DuplicateError(ValidationError):
    pass


@dataclass(frozen=True)
class Result(Generic[T]):
    data: T | None = None
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> "Result[T]":
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: StoreError) -> "Result[T]":
        return cls(data=None, error=error)
