# shopmuse/domain/services/stock_alert_svc.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, List, Optional
import logging
import random
import uuid

from shopmuse.domain.models.assistance import StockAlert, StockAlertType
from shopmuse.domain.repositories.planning_repo import StockAlertRepo
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.services.constants import STOCK_ALERT_TRIGGER

logger = logging.getLogger(__name__)


class StockAlertService:
    """
    Simulated stock watching: every check fires an active alert with a fixed
    probability per alert type. Fired alerts stay active and never expire.
    """

    def __init__(
        self,
        repo: StockAlertRepo,
        catalog: ProductRepo,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repo = repo
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.clock = clock

    async def create_stock_alert(
        self,
        user_id: str,
        product_id: str,
        alert_type: StockAlertType = "back_in_stock",
        threshold: Optional[float] = None,
        product_name: Optional[str] = None,
    ) -> StockAlert:
        product = self.catalog.get_by_product_id(product_id)
        alert = StockAlert(
            alert_id=f"alert_{uuid.uuid4().hex[:12]}",
            product_id=product_id,
            product_name=product_name or (product.name if product else "Unknown Product"),
            alert_type=alert_type,
            threshold=threshold,
            created_at=self.clock(),
        )
        alerts = await self.repo.list(user_id)
        alerts.append(alert)
        await self.repo.save_all(user_id, alerts)
        logger.info("stock alert created user=%s product=%s type=%s", user_id, product_id, alert_type)
        return alert

    async def list_stock_alerts(self, user_id: str) -> List[StockAlert]:
        return await self.repo.list(user_id)

    def should_trigger(self, alert: StockAlert) -> bool:
        return self.rng.random() < STOCK_ALERT_TRIGGER.get(alert.alert_type, 0.0)

    async def check_stock_alerts(self, user_id: str) -> List[StockAlert]:
        alerts = await self.repo.list(user_id)
        fired: List[StockAlert] = []
        for alert in alerts:
            if alert.is_active and self.should_trigger(alert):
                alert.triggered_at = self.clock()
                fired.append(alert)
        if fired:
            await self.repo.save_all(user_id, alerts)
        logger.info("stock alerts checked user=%s active=%s fired=%s",
                    user_id, sum(a.is_active for a in alerts), len(fired))
        return fired
