from coin_collect.economy.rewards.service import RewardLedger

__all__ = ["RewardLedger"]
