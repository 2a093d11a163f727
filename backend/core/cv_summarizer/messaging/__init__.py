"""Work queue messaging."""

from .work_queue import SQSWorkQueue

__all__ = ["SQSWorkQueue"]
