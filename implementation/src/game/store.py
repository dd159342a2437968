from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ResourceStore:
    money: int = 0

    total_money_earned: int = 0
    total_cells_filled: int = 0
    total_contracts_completed: int = 0
    play_time: float = 0.0  # seconds

    def add_money(self, amount: int) -> bool:
        if amount <= 0:
            return False
        self.money += amount
        self.total_money_earned += amount
        return True

    def spend_money(self, amount: int) -> bool:
        if amount <= 0 or self.money < amount:
            return False
        self.money -= amount
        return True

    def stats_dict(self) -> dict:
        return {
            "totalCellsFilled": self.total_cells_filled,
            "totalMoneyEarned": self.total_money_earned,
            "totalContractsCompleted": self.total_contracts_completed,
            "playTime": self.play_time,
        }

    def load_stats(self, data: dict) -> None:
        self.total_cells_filled = int(data.get("totalCellsFilled", 0))
        self.total_money_earned = int(data.get("totalMoneyEarned", 0))
        self.total_contracts_completed = int(data.get("totalContractsCompleted", 0))
        self.play_time = float(data.get("playTime", 0.0))
