"""
Base Agent class and result envelope
Spyglass — Competitive Intelligence Briefings
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import traceback

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AgentResult:
    """Standardized result-or-failure envelope returned by every agent."""
    agent_name: str
    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    @classmethod
    def failure(cls, agent_name: str, error: str, **metadata: Any) -> "AgentResult":
        now = _utcnow()
        return cls(
            agent_name=agent_name,
            success=False,
            error=error,
            metadata=metadata,
            started_at=now,
            finished_at=now,
        )

    def __repr__(self):
        status = "✅" if self.success else "❌"
        dur = f" ({self.duration_seconds:.1f}s)" if self.duration_seconds else ""
        return f"{status} {self.agent_name}{dur}"


class Agent(ABC):
    """
    Abstract base class for agents that wrap one call to the generation service.
    Subclasses implement the coroutine `run(data)` and set `failure_message`,
    the generic text shown to the user when the call fails.
    """

    failure_message: str = "Falha na operação."

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    async def run(self, data: Any) -> Any:
        raise NotImplementedError

    async def execute(self, data: Any) -> AgentResult:
        """
        Wraps `run()` with timing, structured logging, and error handling.
        The real error is logged; the result carries only the generic message.
        """
        started_at = _utcnow()
        self.logger.info(f"[{self.name}] Starting...")
        try:
            result = await self.run(data)
            finished_at = _utcnow()
            duration = (finished_at - started_at).total_seconds()
            self.logger.info(f"[{self.name}] Completed in {duration:.2f}s")
            return AgentResult(
                agent_name=self.name,
                success=True,
                data=result,
                started_at=started_at,
                finished_at=finished_at,
            )
        except Exception as e:
            finished_at = _utcnow()
            self.logger.error(f"[{self.name}] Failed: {e}\n{traceback.format_exc()}")
            return AgentResult(
                agent_name=self.name,
                success=False,
                error=self.failure_message,
                metadata={"exception": type(e).__name__, "detail": str(e)},
                started_at=started_at,
                finished_at=finished_at,
            )

    def __repr__(self):
        return f"<Agent: {self.name}>"
