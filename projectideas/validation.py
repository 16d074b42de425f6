"""
Runtime validation of architectural contracts.

Stores and collaborator services are declared as ``@runtime_checkable``
Protocols. Components validate what they are handed at construction time
with ``ensure_protocol`` so a misconfigured wiring fails at startup rather
than on the first request that reaches the missing method.
"""

import logging
from typing import Type, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar("P")


class ProtocolValidationError(TypeError):
    """Raised when an implementation does not satisfy its protocol"""

    pass


def validate_protocol(implementation: object, protocol: Type[P]) -> None:
    """
    Validate that an implementation satisfies a protocol contract.

    Uses ``isinstance()`` with ``@runtime_checkable``, which checks that
    every protocol member is present (not their signatures).

    Args:
        implementation: The store or service implementation to validate
        protocol: The protocol class to validate against

    Raises:
        ProtocolValidationError: If validation fails
    """
    logger.debug(
        "Validating protocol",
        extra={
            "implementation_type": type(implementation).__name__,
            "protocol_name": protocol.__name__,
        },
    )

    if not isinstance(implementation, protocol):
        logger.error(
            "Protocol validation failed",
            extra={
                "implementation_type": type(implementation).__name__,
                "protocol_name": protocol.__name__,
            },
        )
        raise ProtocolValidationError(
            f"{type(implementation).__name__} does not implement "
            f"{protocol.__name__} protocol. Missing or incorrect methods."
        )


def ensure_protocol(implementation: object, protocol: Type[P]) -> P:
    """
    Validate and return an implementation with proper type annotation.

    Example:
        >>> from projectideas.repositories import DocumentStore
        >>> from projectideas.repositories.memory import MemoryDocumentStore
        >>> store = ensure_protocol(MemoryDocumentStore(), DocumentStore)
    """
    validate_protocol(implementation, protocol)
    return implementation  # type: ignore[return-value]
