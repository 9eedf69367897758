"""
Social graph protocol exceptions.

Every error carries the acting identity and the target identity or value,
so the desynchronized account can be located from the message alone.
"""

from typing import Optional

from copain.domain.exceptions.base import CopainException


class SocialGraphError(CopainException):
    """Base exception for friend-state mutations."""

    def __init__(
        self,
        message: str,
        actor: str,
        target: str,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        merged = {"actor": actor, "target": target}
        merged.update(details or {})
        super().__init__(message, code=code, details=merged)
        self.actor = actor
        self.target = target


class TargetNotFoundError(SocialGraphError):
    """Raised when the target identity has no account on the ledger."""

    def __init__(self, actor: str, target: str):
        super().__init__(
            f"Cannot find account for target {target} "
            f"(requested by {actor}); only existing users can be friended",
            actor=actor,
            target=target,
            code="TARGET_NOT_FOUND",
        )


class SubmissionFailedError(SocialGraphError):
    """Raised when the ledger rejected or could not finalize a transaction."""

    def __init__(
        self,
        actor: str,
        target: str,
        operation: str,
        cause: Exception,
    ):
        super().__init__(
            f"{operation} submitted by {actor} for {target} failed: {cause}",
            actor=actor,
            target=target,
            code="SUBMISSION_FAILED",
            details={"operation": operation},
        )
        self.operation = operation
        self.cause = cause


class PostConditionFailedError(SocialGraphError):
    """Raised when a finalized transaction did not produce the expected state."""

    def __init__(
        self,
        actor: str,
        target: str,
        operation: str,
        expected: str,
        signature: Optional[str] = None,
    ):
        super().__init__(
            f"{operation} by {actor} for {target} did not take effect: "
            f"expected {expected} (tx {signature})",
            actor=actor,
            target=target,
            code="POST_CONDITION_FAILED",
            details={
                "operation": operation,
                "expected": expected,
                "signature": signature,
            },
        )
        self.operation = operation
        self.expected = expected
        self.signature = signature
