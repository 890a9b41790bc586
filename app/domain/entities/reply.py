from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ActionResult:
    action: str
    success: bool
    message: str
    code: str | None = None
    requires_input: bool = False
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MessageResult:
    response_text: str
    context: str
    actions: list[ActionResult] = field(default_factory=list)
    duplicate: bool = False
