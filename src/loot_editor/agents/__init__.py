"""
Background execution of long-running jobs such as modpack scans.
"""

from .orchestrator import AgentOrchestrator, AgentResult, AgentTask, ScannerAgentTask

__all__ = ["AgentOrchestrator", "AgentResult", "AgentTask", "ScannerAgentTask"]
