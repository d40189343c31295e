from dataclasses import dataclass, field
from typing import Literal, Protocol, Sequence


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


@dataclass(frozen=True)
class CompletionRequest:
    model: str
    messages: Sequence[ChatMessage] = field(default_factory=tuple)
    max_tokens: int = 1500
    temperature: float = 0.1


class AIClient(Protocol):
    async def complete(self, request: CompletionRequest) -> str: ...
