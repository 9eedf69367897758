"""
Domain exceptions package.
"""

# Base exceptions
from copain.domain.exceptions.base import (
    ConfigurationError,
    CopainException,
    InvalidIdentityError,
    RecordTooLargeError,
)

# Blockchain exceptions
from copain.domain.exceptions.blockchain import (
    BlockchainException,
    InsufficientFundsException,
    KeypairLoadError,
    ProgramNotDeployedError,
    RPCException,
    TransactionException,
    TransactionTimeoutException,
)

# Social graph exceptions
from copain.domain.exceptions.social import (
    PostConditionFailedError,
    SocialGraphError,
    SubmissionFailedError,
    TargetNotFoundError,
)

__all__ = [
    # Base
    "CopainException",
    "ConfigurationError",
    "InvalidIdentityError",
    "RecordTooLargeError",
    # Blockchain
    "BlockchainException",
    "RPCException",
    "TransactionException",
    "TransactionTimeoutException",
    "InsufficientFundsException",
    "ProgramNotDeployedError",
    "KeypairLoadError",
    # Social graph
    "SocialGraphError",
    "TargetNotFoundError",
    "SubmissionFailedError",
    "PostConditionFailedError",
]
