"""Downstream collaborator that takes fully validated submissions."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from contact_gate.models.submission import Submission

logger = structlog.get_logger()


@runtime_checkable
class SubmissionAcceptor(Protocol):
    """Hands an admitted submission to whatever acts on it (mail, queue, CRM).

    Returns False when the submission could not be taken; exceptions are
    treated as internal failures by the caller.
    """

    async def accept(self, submission: Submission) -> bool: ...


class LoggingAcceptor:
    """Default acceptor: records the submission in the log and succeeds."""

    async def accept(self, submission: Submission) -> bool:
        logger.info("submission_accepted", **submission.summary())
        return True
