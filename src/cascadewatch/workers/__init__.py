"""Background workers.

Workers:
    - PendingTxIngestWorker: Streams pending transactions into the dispatcher
    - BoundedTaskLauncher: Caps concurrent per-transaction units
"""

from cascadewatch.workers.ingest_worker import PendingTxIngestWorker
from cascadewatch.workers.task_launcher import BoundedTaskLauncher

__all__ = [
    "BoundedTaskLauncher",
    "PendingTxIngestWorker",
]
