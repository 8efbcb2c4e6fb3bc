"""Dispatch operations to capability clients.

Absent capabilities and per-capability failures are reported as results,
never raised, so a fan-out across capabilities always reports every slot.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from onvif_provisioning.services.onvif.capabilities import CapabilitySet
from onvif_provisioning.services.onvif.client import ProtocolClient
from onvif_provisioning.services.onvif.registry import CapabilitySlot

logger = logging.getLogger(__name__)

Operation = Callable[[ProtocolClient], Awaitable[Any]]


class ResultStatus(str, Enum):
    """Outcome of one capability invocation."""

    OK = "ok"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class CapabilityResult:
    """Result of invoking an operation on one capability."""

    slot: CapabilitySlot
    status: ResultStatus
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK


def _operation_name(operation: Operation) -> str:
    return getattr(operation, "__name__", repr(operation)).lstrip("_")


class CommandDispatcher:
    """Runs operations against the clients of a CapabilitySet."""

    def __init__(self, capabilities: CapabilitySet):
        self.capabilities = capabilities

    async def invoke(
        self, slot: CapabilitySlot, operation: Operation
    ) -> CapabilityResult:
        """Run ``operation`` on the client for ``slot``.

        Returns an ABSENT result if the device did not advertise the
        capability and a FAILED result if the operation raised.
        """
        client = self.capabilities.get(slot)
        if client is None:
            return CapabilityResult(
                slot=slot,
                status=ResultStatus.ABSENT,
                error=f"{slot.value} service not advertised",
            )

        try:
            data = await operation(client)
        except Exception as e:
            logger.warning(f"{_operation_name(operation)} failed for {slot.value}: {e}")
            return CapabilityResult(slot=slot, status=ResultStatus.FAILED, error=str(e))

        return CapabilityResult(slot=slot, status=ResultStatus.OK, data=data)

    async def fan_out(
        self,
        operation: Operation,
        slots: Optional[Iterable[CapabilitySlot]] = None,
    ) -> dict[CapabilitySlot, CapabilityResult]:
        """Run ``operation`` concurrently on several capabilities.

        Defaults to every slot. Each invocation runs in its own task;
        cancelling one does not cancel the others. The mapping order does
        not reflect completion order.
        """
        targets = list(CapabilitySlot if slots is None else slots)
        tasks = [asyncio.ensure_future(self.invoke(slot, operation)) for slot in targets]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: dict[CapabilitySlot, CapabilityResult] = {}
        for slot, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                reason = "cancelled" if isinstance(outcome, asyncio.CancelledError) else str(outcome)
                logger.warning(f"{_operation_name(operation)} aborted for {slot.value}: {reason}")
                outcome = CapabilityResult(slot=slot, status=ResultStatus.FAILED, error=reason)
            results[slot] = outcome
        return results
