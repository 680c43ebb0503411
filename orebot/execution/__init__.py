from .instructions import ProgramAccounts, deploy_data, slot_mask
from .manager import DeploymentSequencer, ExecutionResult, checkpoint_round_for

__all__ = [
    "DeploymentSequencer",
    "ExecutionResult",
    "ProgramAccounts",
    "checkpoint_round_for",
    "deploy_data",
    "slot_mask",
]
