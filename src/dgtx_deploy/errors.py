"""
Error taxonomy for deployment tooling.

Nothing here is recovered locally: every error propagates to the CLI (or
the test runner) and aborts the remaining sequence.  The CLI maps each
class to its ``exit_code``.
"""

from __future__ import annotations


class DeployError(RuntimeError):
    exit_code: int = 1


class ConfigError(DeployError):
    exit_code = 2


class QueryFailed(DeployError):
    """A read against the node failed (transport or JSON-RPC error)."""

    exit_code = 3


class ReceiptTimeout(QueryFailed):
    pass


class TransactionReverted(DeployError):
    """The chain rejected a submitted transaction."""

    exit_code = 4

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class PredictionMismatch(DeployError):
    """A predicted contract address does not match what the chain did."""

    exit_code = 5

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual
