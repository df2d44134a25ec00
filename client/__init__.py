"""Client package for udpping.

Contains the two client loops and the session orchestrator:
- sender: Sender, SendError
- receiver: Receiver
- runner: run_session, run_client, ExitCode
"""

from client.receiver import Receiver
from client.runner import ExitCode, run_client, run_session
from client.sender import SendError, Sender

__all__ = [
    "ExitCode",
    "Receiver",
    "SendError",
    "Sender",
    "run_client",
    "run_session",
]
