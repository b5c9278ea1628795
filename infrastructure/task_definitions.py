"""Helpers for referring to ECS task definitions in IAM policies."""


def task_definition_family(task_definition: str) -> str:
    """Return the family of a task definition reference.

    Accepts 'family', 'family:revision' or a full task definition ARN,
    with or without a revision.
    """
    name = task_definition.rsplit('task-definition/', 1)[-1]
    return name.split(':', 1)[0]


def run_task_resource(task_definition: str) -> str:
    """Return an IAM resource matching every revision of the task definition family."""
    return f'arn:aws:ecs:*:*:task-definition/{task_definition_family(task_definition)}:*'
