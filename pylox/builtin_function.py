import time
from dataclasses import dataclass
from typing import Any, Callable, List

from pylox.types import LoxCallable


@dataclass
class BuiltinFunction(LoxCallable):
    name: str
    num_params: int
    fn: Callable[[List[Any]], Any]

    def arity(self) -> int:
        return self.num_params

    def call(self, interpreter, arguments: List[Any]) -> Any:
        return self.fn(arguments)

    def __repr__(self) -> str:
        return "<native fn>"


def std_clock(args: List[Any]) -> float:
    return time.time()


NATIVES = [
    BuiltinFunction('clock', 0, std_clock),
]
