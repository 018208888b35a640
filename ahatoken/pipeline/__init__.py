"""
Step pipeline executor.

Provides:
  - Invocation / Suspension / SideEffect : the three step kinds
  - StepPipeline                         : sequential executor
  - use_methods_on                       : run steps against one contract
"""

from .executor import StepPipeline, extract_reason, use_methods_on
from .steps import Invocation, SideEffect, Step, Suspension, coerce_step, step_from_dict

__all__ = [
    "StepPipeline",
    "extract_reason",
    "use_methods_on",
    "Invocation",
    "SideEffect",
    "Step",
    "Suspension",
    "coerce_step",
    "step_from_dict",
]
