"""
Wallet position accumulation.

Raw staked and held amounts are converted to human units with the PT mint
decimals and summed per wallet. LP tokens are also expressed as their PT/YT
backing through the pool LP rates.

Staked LP backing is floored to whole raw units before scaling; held LP
backing is not. Both paths are kept as observed on the reference deployment
until the program's own rounding is confirmed.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from sandglass.fixed_point import ZERO, fixed_point, round_down, scale_down, to_decimal
from sandglass.models import LpRates, StakeRecord, TokenHolding, WalletPosition


class PositionAccumulator(ABC):
    """Shared conversion logic for both accumulation modes"""

    def __init__(self, lp_rates: LpRates, mint_decimals: int):
        self.lp_rates = lp_rates
        self.mint_decimals = mint_decimals

    @abstractmethod
    def _position_for(self, wallet_address: str) -> Optional[WalletPosition]:
        """Position that amounts for this wallet accumulate into, or None to ignore them."""
        pass

    @fixed_point
    def add_raw(
        self,
        wallet_address: str,
        pt_amount: Decimal = ZERO,
        yt_amount: Decimal = ZERO,
        lp_amount: Decimal = ZERO,
        lp_pt_amount: Decimal = ZERO,
        lp_yt_amount: Decimal = ZERO,
    ) -> None:
        """Add raw amounts to a wallet, scaling each by the mint decimals."""
        position = self._position_for(wallet_address)
        if position is None:
            return

        decimals = self.mint_decimals
        position.pt_amount += scale_down(pt_amount, decimals)
        position.yt_amount += scale_down(yt_amount, decimals)
        position.lp_amount += scale_down(lp_amount, decimals)
        position.lp_pt_amount += scale_down(lp_pt_amount, decimals)
        position.lp_yt_amount += scale_down(lp_yt_amount, decimals)

    @fixed_point
    def add_stake(self, record: Optional[StakeRecord]) -> bool:
        """
        Add a staked position.

        Returns:
            False when the record is missing or holds nothing
        """
        if record is None or record.is_empty:
            return False

        lp_amount = Decimal(record.stake_lp_amount)
        self.add_raw(
            record.user_address,
            pt_amount=Decimal(record.stake_pt_amount),
            yt_amount=Decimal(record.stake_yt_amount),
            lp_amount=lp_amount,
            lp_pt_amount=round_down(lp_amount * self.lp_rates.lp_pt_rate),
            lp_yt_amount=round_down(lp_amount * self.lp_rates.lp_yt_rate),
        )
        return True

    def add_pt_holding(self, holding: Optional[TokenHolding]) -> None:
        if holding is not None:
            self.add_raw(holding.owner, pt_amount=to_decimal(holding.amount))

    def add_yt_holding(self, holding: Optional[TokenHolding]) -> None:
        if holding is not None:
            self.add_raw(holding.owner, yt_amount=to_decimal(holding.amount))

    @fixed_point
    def add_lp_holding(self, holding: Optional[TokenHolding]) -> None:
        if holding is None:
            return
        lp_amount = to_decimal(holding.amount)
        self.add_raw(
            holding.owner,
            lp_amount=lp_amount,
            lp_pt_amount=lp_amount * self.lp_rates.lp_pt_rate,
            lp_yt_amount=lp_amount * self.lp_rates.lp_yt_rate,
        )


class PositionBook(PositionAccumulator):
    """Accumulates positions of every wallet seen in a market"""

    def __init__(self, lp_rates: LpRates, mint_decimals: int):
        super().__init__(lp_rates, mint_decimals)
        self._positions: Dict[str, WalletPosition] = {}

    def _position_for(self, wallet_address: str) -> WalletPosition:
        position = self._positions.get(wallet_address)
        if position is None:
            position = WalletPosition(wallet_address=wallet_address)
            self._positions[wallet_address] = position
        return position

    def get(self, wallet_address: str) -> Optional[WalletPosition]:
        return self._positions.get(wallet_address)

    def positions(self) -> List[WalletPosition]:
        return list(self._positions.values())

    def __len__(self) -> int:
        return len(self._positions)


class WalletLedger(PositionAccumulator):
    """Accumulates one known wallet; inputs owned by anyone else are ignored"""

    def __init__(self, wallet_address: str, lp_rates: LpRates, mint_decimals: int):
        super().__init__(lp_rates, mint_decimals)
        self.position = WalletPosition(wallet_address=wallet_address)

    def _position_for(self, wallet_address: str) -> Optional[WalletPosition]:
        if wallet_address != self.position.wallet_address:
            return None
        return self.position
