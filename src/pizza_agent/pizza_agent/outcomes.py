"""Tagged outcome of one remote provider call.

Every call a workflow operation makes to the commerce client goes through
call_remote(), which sorts the result into one of three cases:

    Ok(data)            the provider accepted the request
    Rejected(reason)    the provider refused it (invalid item, declined card)
    SystemFault(detail) the provider could not be reached or answered nonsense

Operations report Rejected as a normal result with a failed status and
raise RemoteSystemError for SystemFault. Placement is the exception: an
outage there is also reported as a failed result.
"""

from collections.abc import Callable
from typing import Any, Literal, NoReturn

from loguru import logger
from pydantic import BaseModel

from .errors import CommerceRejectedError, RemoteSystemError


class Ok(BaseModel):
    kind: Literal["ok"] = "ok"
    data: Any = None


class Rejected(BaseModel):
    kind: Literal["rejected"] = "rejected"
    reason: str


class SystemFault(BaseModel):
    kind: Literal["system_fault"] = "system_fault"
    detail: str

    def raise_error(self, context: str) -> NoReturn:
        raise RemoteSystemError(f"{context}: {self.detail}")


Outcome = Ok | Rejected | SystemFault


def call_remote(label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
    """Invoke a commerce client method and classify the result."""
    logger.debug("Remote call: {}", label)
    try:
        data = fn(*args, **kwargs)
    except CommerceRejectedError as exc:
        logger.info("Remote call {} rejected: {}", label, exc.reason)
        return Rejected(reason=exc.reason)
    except RemoteSystemError as exc:
        logger.warning("Remote call {} failed: {}", label, exc.message)
        return SystemFault(detail=exc.message)
    return Ok(data=data)
