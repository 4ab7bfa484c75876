from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class PipelineContext:
    """
    Collects what a sweep reports back to the caller.
    """

    source_hash: Optional[str] = None
    # Non-fatal failures (operation label + message)
    errors: List[str] = field(default_factory=list)
    metrics: dict[str, Any] = field(default_factory=dict)

    def report(self, message: str) -> None:
        self.errors.append(message)
