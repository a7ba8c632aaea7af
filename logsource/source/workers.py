"""Worker inventory: the executors a batch plan may be scheduled on."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class WorkerId:
    """
    One executor on one host.
    
    Attributes:
        host: Host name
        executor_id: Executor identity on that host
    """
    host: str
    executor_id: str
    
    def __str__(self) -> str:
        return f"executor_{self.host}_{self.executor_id}"


def sort_workers(workers: Iterable[WorkerId]) -> List[WorkerId]:
    """
    Order workers by host descending, then executor id descending.
    
    The same worker set always yields the same order, which keeps partition
    affinity stable from one cycle to the next.
    """
    return sorted(workers, key=lambda w: (w.host, w.executor_id), reverse=True)


class WorkerInventory(ABC):
    """Source of the currently available workers."""
    
    @abstractmethod
    def sorted_workers(self) -> List[WorkerId]:
        """Available workers in ``sort_workers`` order."""
        pass


class StaticWorkerInventory(WorkerInventory):
    """Fixed worker list, e.g. for single-host deployments and tests."""
    
    def __init__(self, workers: Iterable[WorkerId] = ()):
        self._workers = sort_workers(workers)
    
    def sorted_workers(self) -> List[WorkerId]:
        return list(self._workers)
