"""
Utility modules for the ads publisher.

- logging: Console/JSON logging with entry/exit decorators
- config: Environment + command-line run configuration
- metrics: Prometheus counters for publish runs
"""

from ads_publisher.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
