"""Operation execution: workers per kind and the asynchronous dispatcher."""

from .dispatcher import OperationQueue
from .workers import WORKERS, Worker, WorkerContext

__all__ = ["WORKERS", "OperationQueue", "Worker", "WorkerContext"]
