"""Two-valued outcome returned by every domain command and store write."""

from enum import Enum


class Result(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def succeeded(self) -> bool:
        return self is Result.SUCCESS
