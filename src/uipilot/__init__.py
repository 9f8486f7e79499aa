"""uipilot - goal-driven UI exploration agents and scenario orchestration."""

__version__ = "0.1.0"
