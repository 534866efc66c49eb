"""Audit hook double that captures guard decisions for assertions."""

from dataclasses import dataclass, field

from src.access.rbac.audit import GuardDecisionEvent


@dataclass
class AuditRecorder:
    """Callable audit hook recording every GuardDecisionEvent.

    Set ``fail_mode`` to make the hook raise, for testing that hook
    failures never change a decision.
    """

    fail_mode: bool = False
    events: list[GuardDecisionEvent] = field(default_factory=list)

    def __call__(self, event: GuardDecisionEvent) -> None:
        if self.fail_mode:
            raise RuntimeError("audit sink unavailable")
        self.events.append(event)

    def reset(self) -> None:
        """Reset all captured state."""
        self.events.clear()
        self.fail_mode = False

    @property
    def outcomes(self) -> list[str]:
        return [event.outcome for event in self.events]

    @property
    def last(self) -> GuardDecisionEvent:
        assert self.events, "No guard decisions were recorded"
        return self.events[-1]
