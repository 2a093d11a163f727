"""
SQS FIFO work queue.

Messages sharing a group id are delivered in order; duplicates sharing a
deduplication id within the five-minute window collapse to one enqueue.

Dependencies: boto3
System role: Work queue adapter used by the intake gate
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from backend.core.exceptions import WorkQueueError

logger = logging.getLogger(__name__)


class SQSWorkQueue:
    """Enqueue work messages on an SQS FIFO queue."""

    def __init__(self, sqs_client: Any, queue_url: str) -> None:
        self._sqs = sqs_client
        self._queue_url = queue_url

    def enqueue(self, group_id: str, dedup_id: str, payload: str) -> str:
        """
        Send one message.

        Args:
            group_id: MessageGroupId (ordering scope)
            dedup_id: MessageDeduplicationId
            payload: Message body (JSON string)

        Returns:
            str: SQS MessageId

        Raises:
            WorkQueueError: When SendMessage fails
        """
        try:
            response = self._sqs.send_message(
                QueueUrl=self._queue_url,
                MessageBody=payload,
                MessageGroupId=group_id,
                MessageDeduplicationId=dedup_id,
            )
        except (ClientError, BotoCoreError) as e:
            raise WorkQueueError(
                f"Failed to send message to SQS: {e}",
                {"group_id": group_id, "dedup_id": dedup_id},
            ) from e

        message_id = response.get("MessageId", "")
        logger.info(
            "enqueue - Message sent",
            extra={"message_id": message_id, "group_id": group_id, "dedup_id": dedup_id},
        )
        return message_id
