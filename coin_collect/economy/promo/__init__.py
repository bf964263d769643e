from coin_collect.economy.promo.catalog import PromocodesService
from coin_collect.economy.promo.reconciliation import PromocodeReconciler
from coin_collect.economy.promo.service import PromocodeRedemptionService

__all__ = ["PromocodeReconciler", "PromocodeRedemptionService", "PromocodesService"]
