from coin_collect.economy.promo import PromocodeReconciler, PromocodeRedemptionService, PromocodesService
from coin_collect.economy.rewards import RewardLedger

__all__ = [
    "PromocodeReconciler",
    "PromocodeRedemptionService",
    "PromocodesService",
    "RewardLedger",
]
