"""Main CDK stack for the Azure DevOps agent launcher."""
from aws_cdk import CfnOutput, Duration, Stack
from constructs import Construct

from launcher_constructs import LauncherFunction, TriggerQueue

LAUNCHER_TIMEOUT = Duration.minutes(15)


class AgentLauncherStack(Stack):
    """CDK stack for the SQS -> Lambda -> ECS agent launcher."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        ecs_cluster_name: str,
        task_definition_arn: str,
        subnet_ids: list[str],
        security_group_ids: list[str],
        ado_org: str,
        ado_domain: str,
        ado_api_version: str,
        **kwargs
    ):
        """Initialize the agent launcher stack.

        Args:
            scope: CDK scope.
            id: Stack ID.
            ecs_cluster_name: Name of the ECS cluster to run agent tasks on.
            task_definition_arn: ARN of the agent task definition.
            subnet_ids: Subnet IDs for the agent tasks.
            security_group_ids: Security group IDs for the agent tasks.
            ado_org: Azure DevOps organization.
            ado_domain: Azure DevOps domain.
            ado_api_version: Azure DevOps REST API version.
            **kwargs: Additional stack properties.
        """
        super().__init__(scope, id, **kwargs)

        # Messages must stay invisible while the launcher is still waiting on them
        trigger = TriggerQueue(self, 'Trigger',
            visibility_timeout=Duration.minutes(16)
        )

        LauncherFunction(self, 'Launcher',
            queue=trigger.queue,
            timeout=LAUNCHER_TIMEOUT,
            ecs_cluster_name=ecs_cluster_name,
            task_definition_arn=task_definition_arn,
            subnet_ids=subnet_ids,
            security_group_ids=security_group_ids,
            ado_org=ado_org,
            ado_domain=ado_domain,
            ado_api_version=ado_api_version
        )

        CfnOutput(self, 'TriggerQueueUrl', value=trigger.queue.queue_url)
        CfnOutput(self, 'TriggerDlqUrl', value=trigger.dlq.queue_url)
