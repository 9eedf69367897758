"""
Monitoring infrastructure.
"""

from copain.infrastructure.monitoring.system_reporter import SystemReporter

__all__ = ["SystemReporter"]
