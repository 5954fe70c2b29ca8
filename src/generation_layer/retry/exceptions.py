"""
Retry exceptions.

RetryExhausted is raised when a transient failure persisted through every
allowed attempt (or the retry budget ran out). Non-transient failures are
re-raised unchanged after the first attempt.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from generation_layer.provider.exceptions import ProviderError
    from generation_layer.retry.metadata import RetryMetadata


class RetryExhausted(Exception):
    """
    Raised when all retry attempts for a transient failure are used up.
    
    Attributes:
        last_error: ProviderError of the final attempt
        retry_metadata: Attempt history
    """
    
    def __init__(self, last_error: "ProviderError", retry_metadata: "RetryMetadata") -> None:
        self.last_error = last_error
        self.retry_metadata = retry_metadata
        
        reason = "deadline reached" if retry_metadata.deadline_hit else "attempts exhausted"
        super().__init__(
            f"Provider call failed after {retry_metadata.total_attempts} attempt(s), {reason}. "
            f"Final error: {last_error}"
        )
    
    @property
    def kind(self):
        return self.last_error.kind
