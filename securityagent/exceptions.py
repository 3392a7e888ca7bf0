"""
Exception types raised by the security agent.
"""


class SecurityAgentError(Exception):
    """Base class for all security agent errors."""


class ConfigurationError(SecurityAgentError):
    """Raised when the run cannot start because of invalid configuration."""


class BackendError(SecurityAgentError):
    """Raised when a generative backend call fails at the transport or protocol level."""

    def __init__(self, message: str, provider: str = "", status_code: int = 0):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
