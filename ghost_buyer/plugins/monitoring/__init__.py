# GHOST BUYER Monitoring Plugins
"""
Monitoring plugins that observe executions.

Available Plugins:
    - Risk Monitor (step failures and pattern risk alerts)
"""

from .risk_monitor import MonitorAlert, RiskMonitor, RiskMonitorConfig

__all__ = [
    "MonitorAlert",
    "RiskMonitor",
    "RiskMonitorConfig",
]
