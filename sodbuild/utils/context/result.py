#
# Copyright 2024 sodbuild Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

from typing import Generic, Optional, TypeVar

T = TypeVar("T")


# Value or error of one step
class CliResult(Generic[T]):
    __slots__ = ("value", "error")

    def __init__(self, value: Optional[T] = None, error: Optional[Exception] = None):
        if value is not None and error is not None:
            raise ValueError("CliResult holds a value or an error, not both")
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> "CliResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: Exception) -> "CliResult[T]":
        return cls(error=error)

    def is_success(self) -> bool:
        return self.error is None

    def is_failure(self) -> bool:
        return self.error is not None

    def get_value(self, default=None):
        return self.value if self.is_success() else default

    def get_error(self, default=None):
        return self.error if self.is_failure() else default

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.is_failure():
            raise self.error
        return self.value

    def __repr__(self):
        if self.is_failure():
            return f"CliResult(error={self.error!r})"
        return f"CliResult(value={self.value!r})"
