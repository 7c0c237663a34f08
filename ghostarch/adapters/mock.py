"""
Mock adapter: test double for every adapter operation.

Used by ``--mock`` runs and by the test suite to walk the install flows
without touching pacman, the user database or the network.
"""

from __future__ import annotations

from typing import Any

from ghostarch.adapters.base import Adapter, ExecutionContext
from ghostarch.core.models.action import Receipt


class MockAdapter(Adapter):
    """Universal mock adapter.

    Returns success for everything by default. Responses can be set per
    step name (``Action.name``), so tests can script a flow without
    knowing the generated action ids.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls_named(self, step: str) -> list[ExecutionContext]:
        """Execution contexts whose action carries the given step name."""
        return [c for c in self._call_log if c.action.name == step]

    def step_names(self) -> list[str]:
        """Step names in call order."""
        return [c.action.name for c in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, step: str, receipt: Receipt) -> None:
        """Set a custom response for a step name."""
        self._responses[step] = receipt

    def set_failure(self, step: str, error: str = "Mock failure") -> None:
        """Configure a step to fail."""
        self._responses[step] = Receipt.failure(
            adapter=self._name,
            action_id=step,
            error=error,
        )

    def set_metadata(self, step: str, **metadata: Any) -> None:
        """Configure a step to succeed with the given metadata."""
        self._responses[step] = Receipt.success(
            adapter=self._name,
            action_id=step,
            output=self._default_output,
            metadata={"mock": True, **metadata},
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        if context.action.name in self._responses:
            return self._responses[context.action.name].model_copy(
                update={"action_id": context.action.id}
            )

        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
