"""SQS trigger queue construct for Azure DevOps check payloads."""
from aws_cdk import (
    aws_sqs as sqs,
    Duration
)
from constructs import Construct


class TriggerQueue(Construct):
    """Creates the trigger queue with a dead-letter queue."""

    def __init__(self, scope: Construct, id: str, visibility_timeout: Duration):
        """Initialize the trigger queue construct.

        Args:
            scope: CDK scope.
            id: Construct ID.
            visibility_timeout: Visibility timeout, at least the consumer's timeout.
        """
        super().__init__(scope, id)

        self.dlq = sqs.Queue(self, 'TriggerDlq',
            queue_name='ado-agent-launcher-dlq',
            retention_period=Duration.days(14),
            enforce_ssl=True
        )

        self.queue = sqs.Queue(self, 'TriggerQueue',
            queue_name='ado-agent-launcher-queue',
            visibility_timeout=visibility_timeout,
            enforce_ssl=True,
            dead_letter_queue=sqs.DeadLetterQueue(
                queue=self.dlq,
                max_receive_count=3
            )
        )
