"""
AHA Token Economics Harness

Core imports are lazily loaded so importing a submodule stays cheap.
For direct module access, import from submodules:

    from ahatoken.deploy import fresh_deployment
    from ahatoken.pipeline import Invocation, Suspension, SideEffect
    from ahatoken.exceptions import MintExceedsAllowance
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'LedgerService':
        from .ledger import LedgerService
        return LedgerService
    elif name == 'StepPipeline':
        from .pipeline import StepPipeline
        return StepPipeline
    elif name == 'use_methods_on':
        from .pipeline import use_methods_on
        return use_methods_on
    elif name == 'deploy_suite':
        from .deploy import deploy_suite
        return deploy_suite
    elif name == 'fresh_deployment':
        from .deploy import fresh_deployment
        return fresh_deployment
    raise AttributeError(f"module 'ahatoken' has no attribute {name!r}")

__all__ = ['LedgerService', 'StepPipeline', 'use_methods_on', 'deploy_suite', 'fresh_deployment']
