from dataclasses import dataclass, field


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class BoundaryDetection:
    """Output of a boundary detector: 1-based first pages of each logical document."""

    pages: list[int] = field(default_factory=list)
    method: str = ""
    model: str | None = None
    usage: TokenUsage | None = None
