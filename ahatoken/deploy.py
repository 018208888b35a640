"""
Scenario deployment.

Every scenario gets its own ledger with the reward token, the AHA token and
the stake contract deployed from account 0:

    async with fresh_deployment() as d:
        await use_methods_on(d.token, [...])
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional

from .config import HarnessConfig, load_config
from .ledger.clock import Clock, SystemClock
from .ledger.service import ContractHandle, LedgerService
from .logger import get_logger
from .schedule.checkpoints import CheckpointTuple, build_checkpoints
from .staking.contract import AHATokenStake
from .token.aha import AHAToken
from .token.erc20 import ERC20Token

logger = get_logger(__name__)


@dataclass
class Deployment:
    """Handle to one scenario's ledger and contracts."""
    ledger: LedgerService
    accounts: List[str]
    token: ContractHandle
    stake: ContractHandle
    reward_token: ContractHandle
    config: HarnessConfig
    clock: Clock

    @property
    def owner(self) -> str:
        return self.accounts[0]

    def checkpoint_args(self) -> List[CheckpointTuple]:
        """Configured unlock table with activation times taken from now."""
        return build_checkpoints(self.config.checkpoint_rows(), self.clock.now())

    def close(self) -> None:
        self.ledger.close()


async def deploy_suite(
    config: Optional[HarnessConfig] = None,
    clock: Optional[Clock] = None,
) -> Deployment:
    """Start a ledger and deploy the three contracts."""
    config = config or load_config()
    clock = clock or SystemClock()
    ledger = LedgerService(
        clock=clock,
        account_seed=config.ledger.account_seed,
        account_count=config.ledger.account_count,
    )
    accounts = ledger.accounts
    owner = accounts[0]

    reward = config.reward_token
    reward_token = await ledger.deploy(
        ERC20Token,
        [reward.supply, reward.name, reward.symbol, reward.decimals],
        owner,
    )
    token_cfg = config.token
    token = await ledger.deploy(
        AHAToken,
        [token_cfg.name, token_cfg.symbol, token_cfg.max_supply, token_cfg.mint_on_deploy_fraction],
        owner,
    )
    stake = await ledger.deploy(AHATokenStake, [token.address, reward_token.address], owner)

    logger.info(
        f"Suite deployed: token={token.address} stake={stake.address} "
        f"reward={reward_token.address}"
    )
    return Deployment(
        ledger=ledger,
        accounts=accounts,
        token=token,
        stake=stake,
        reward_token=reward_token,
        config=config,
        clock=clock,
    )


@asynccontextmanager
async def fresh_deployment(
    config: Optional[HarnessConfig] = None,
    clock: Optional[Clock] = None,
) -> AsyncIterator[Deployment]:
    """Deployment scoped to a ``with`` block; the ledger is closed on exit."""
    deployment = await deploy_suite(config, clock)
    try:
        yield deployment
    finally:
        deployment.close()
