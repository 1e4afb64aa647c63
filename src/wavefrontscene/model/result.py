"""Tagged result values for stage outcomes that are stored before they are consumed."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from wavefrontscene.model.errors import ObjLoadError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: ObjLoadError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]
