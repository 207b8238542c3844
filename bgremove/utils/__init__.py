"""
Utility modules for bgremove.

Shared utilities used by every component:
- logging: Structured logging with entry/exit decorators and secret redaction
- config: Environment configuration loading
- metrics: Prometheus instrumentation
"""

from bgremove.utils.logging import get_logger, log_function_call, redact

__all__ = ["get_logger", "log_function_call", "redact"]
