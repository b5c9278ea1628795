"""Agent launcher Lambda construct."""
from aws_cdk import (
    aws_lambda as lambda_,
    aws_sqs as sqs,
    aws_iam as iam,
    BundlingOptions,
    Duration
)
from aws_cdk.aws_lambda_event_sources import SqsEventSource
from constructs import Construct

from task_definitions import run_task_resource


class LauncherFunction(Construct):
    """Creates the Lambda that launches ECS agent tasks and calls back to Azure DevOps."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        queue: sqs.IQueue,
        timeout: Duration,
        ecs_cluster_name: str,
        task_definition_arn: str,
        subnet_ids: list[str],
        security_group_ids: list[str],
        ado_org: str,
        ado_domain: str,
        ado_api_version: str,
        poll_interval_seconds: str = '1'
    ):
        """Initialize the launcher Lambda construct.

        Args:
            scope: CDK scope.
            id: Construct ID.
            queue: SQS queue to consume Azure DevOps payloads from.
            timeout: Lambda timeout, the upper bound on waiting for a task.
            ecs_cluster_name: Name of the ECS cluster to run agent tasks on.
            task_definition_arn: Agent task definition, as family, family:revision or ARN.
            subnet_ids: Subnet IDs for the agent tasks.
            security_group_ids: Security group IDs for the agent tasks.
            ado_org: Azure DevOps organization.
            ado_domain: Azure DevOps domain.
            ado_api_version: Azure DevOps REST API version.
            poll_interval_seconds: Seconds between task status queries.
        """
        super().__init__(scope, id)

        # requests is not part of the Lambda runtime, so bundle it
        code = lambda_.Code.from_asset('../launcher_lambda',
            bundling=BundlingOptions(
                image=lambda_.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    'bash', '-c',
                    'pip install -r requirements.txt -t /asset-output && cp -au . /asset-output'
                ]
            )
        )

        self.function = lambda_.Function(self, 'LauncherFunction',
            function_name='ado-agent-launcher-lambda',
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler='handler.handler',
            code=code,
            timeout=timeout,
            memory_size=256,
            logging_format=lambda_.LoggingFormat.JSON,
            environment={
                'ECS_CLUSTER': ecs_cluster_name,
                'ECS_TASK_DEFINITION': task_definition_arn,
                'SUBNET_IDS': ','.join(subnet_ids),
                'SECURITY_GROUP_IDS': ','.join(security_group_ids),
                'ADO_ORG': ado_org,
                'ADO_DOMAIN': ado_domain,
                'ADO_API_VERSION': ado_api_version,
                'POLL_INTERVAL_SECONDS': poll_interval_seconds
            }
        )

        # Grant permissions to read from SQS
        queue.grant_consume_messages(self.function)

        # Grant permissions to run and describe ECS tasks
        self.function.add_to_role_policy(iam.PolicyStatement(
            actions=['ecs:RunTask'],
            resources=[run_task_resource(task_definition_arn)]
        ))
        self.function.add_to_role_policy(iam.PolicyStatement(
            actions=[
                'ecs:DescribeTasks',
                'ecs:TagResource'
            ],
            resources=['*']
        ))

        # Grant permissions to pass role to ECS tasks
        self.function.add_to_role_policy(iam.PolicyStatement(
            actions=['iam:PassRole'],
            resources=['*'],
            conditions={
                'StringLike': {
                    'iam:PassedToService': 'ecs-tasks.amazonaws.com'
                }
            }
        ))

        # One message per invocation, each one may wait for a task to start
        self.function.add_event_source(
            SqsEventSource(queue, batch_size=1)
        )
