"""CDK constructs for the Azure DevOps agent launcher."""
from .trigger_queue import TriggerQueue
from .launcher_function import LauncherFunction

__all__ = [
    'TriggerQueue',
    'LauncherFunction',
]
