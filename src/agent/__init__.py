"""
Booking Agent Module - drives the dialogue engine and its collaborators.
"""

from .orchestrator import AgentReply, BookingAgent

__all__ = [
    "AgentReply",
    "BookingAgent",
]
