"""
tierstake deployment migrations.
"""

from .deploy import Deployment, deploy_staking, fund_rewards

__all__ = [
    "Deployment",
    "deploy_staking",
    "fund_rewards",
]
