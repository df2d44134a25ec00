"""Server package for udpping.

Contains the passive echo reflector:
- echo: EchoServer
- runner: run_server
"""

from server.echo import EchoServer
from server.runner import run_server

__all__ = [
    "EchoServer",
    "run_server",
]
