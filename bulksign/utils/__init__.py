"""Utility modules for common operations."""

from bulksign.utils.commands import format_command, mask_secrets
from bulksign.utils.retry import RetryPolicy, RetryResult, with_retry

__all__ = [
    "RetryPolicy",
    "RetryResult",
    "format_command",
    "mask_secrets",
    "with_retry",
]
