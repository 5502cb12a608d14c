from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    value: Any = None

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: str  # "validation" | "not_found" | "dependency"
    reason: str

    ok = False


StepResult = Union[Success, Failure]
