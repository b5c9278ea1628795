#!/usr/bin/env python3
"""CDK app entry point for the Azure DevOps agent launcher."""
import os
import aws_cdk as cdk

from launcher_stack import AgentLauncherStack


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


app = cdk.App()

# Get configuration from context or environment
ecs_cluster_name = app.node.try_get_context('ecs_cluster_name') or os.environ.get('ECS_CLUSTER')
task_definition_arn = app.node.try_get_context('task_definition_arn') or os.environ.get('ECS_TASK_DEFINITION')
subnet_ids = _split(app.node.try_get_context('subnet_ids') or os.environ.get('SUBNET_IDS', ''))
security_group_ids = _split(app.node.try_get_context('security_group_ids') or os.environ.get('SECURITY_GROUP_IDS', ''))
ado_org = app.node.try_get_context('ado_org') or os.environ.get('ADO_ORG')
ado_domain = app.node.try_get_context('ado_domain') or os.environ.get('ADO_DOMAIN', 'dev.azure.com')
ado_api_version = app.node.try_get_context('ado_api_version') or os.environ.get('ADO_API_VERSION', '7.1-preview.3')

# Validate required configuration
if not ecs_cluster_name:
    raise ValueError("ecs_cluster_name is required. Set via context or ECS_CLUSTER environment variable.")
if not task_definition_arn:
    raise ValueError("task_definition_arn is required. Set via context or ECS_TASK_DEFINITION environment variable.")
if not subnet_ids:
    raise ValueError("subnet_ids is required. Set via context or SUBNET_IDS environment variable.")
if not security_group_ids:
    raise ValueError("security_group_ids is required. Set via context or SECURITY_GROUP_IDS environment variable.")
if not ado_org:
    raise ValueError("ado_org is required. Set via context or ADO_ORG environment variable.")

AgentLauncherStack(app, 'AgentLauncherStack',
    ecs_cluster_name=ecs_cluster_name,
    task_definition_arn=task_definition_arn,
    subnet_ids=subnet_ids,
    security_group_ids=security_group_ids,
    ado_org=ado_org,
    ado_domain=ado_domain,
    ado_api_version=ado_api_version,
    env=cdk.Environment(
        account=os.environ.get('CDK_DEFAULT_ACCOUNT'),
        region=os.environ.get('CDK_DEFAULT_REGION', 'us-east-1')
    )
)

app.synth()
