"""Best-effort scheduling priority for the client loops.

Raising priority reduces self-inflicted jitter from OS scheduling. It is a
hint only: failure is logged and measurement proceeds unchanged.
"""

import logging
import os
import threading

logger = logging.getLogger(__name__)

# Nice value requested for the sender and receiver threads
HIGH_PRIORITY_NICE = -10


def raise_thread_priority(label: str, nice: int = HIGH_PRIORITY_NICE) -> bool:
    """Raise the scheduling priority of the calling thread.

    On Linux a thread id is accepted by setpriority(PRIO_PROCESS), so this
    affects only the calling thread. Returns True if the priority was set.
    """
    setpriority = getattr(os, "setpriority", None)
    if setpriority is None:
        logger.debug(f"Thread priority ({label}) not supported on this platform")
        return False

    tid = threading.get_native_id()
    try:
        setpriority(os.PRIO_PROCESS, tid, nice)
    except PermissionError:
        logger.warning(
            f"Set thread priority ({label}) failed: permission denied (run with sudo)"
        )
        return False
    except OSError as e:
        logger.warning(f"Set thread priority ({label}) failed: {e}")
        return False

    logger.debug(f"Thread priority ({label}) set to nice={nice} (tid={tid})")
    return True
