"""
tierstake Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole package. For direct module access, import from submodules:

    from tierstake.staking import StakingEngine
    from tierstake.tokens import TestToken
    from tierstake.chain import LocalChain
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading."""
    if name == 'StakingEngine':
        from .staking import StakingEngine
        return StakingEngine
    elif name == 'TestToken':
        from .tokens import TestToken
        return TestToken
    elif name == 'LocalChain':
        from .chain import LocalChain
        return LocalChain
    elif name == 'deploy_staking':
        from .migrations import deploy_staking
        return deploy_staking
    raise AttributeError(f"module 'tierstake' has no attribute {name!r}")

__all__ = ['StakingEngine', 'TestToken', 'LocalChain', 'deploy_staking']
