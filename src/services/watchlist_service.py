from src.analyzers import watchlist
from src.models.crypto import Quote
from src.models.portfolio import WatchlistItem, utcnow
from src.storage.store import Store
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


class WatchlistService:
    def __init__(self, store: Store):
        self.items = store.collection("watchlists")

    def list(self, user_id: str) -> list[WatchlistItem]:
        return [WatchlistItem(**r) for r in self.items.list({"user_id": user_id})]

    def coin_ids(self, user_id: str) -> frozenset[str]:
        return frozenset(item.coin_id for item in self.list(user_id))

    def toggle(self, user_id: str, quote: Quote) -> bool:
        """Flip membership of the coin and persist it. Returns True if now watched."""
        before = self.coin_ids(user_id)
        after = watchlist.toggle(quote.id, before)

        if watchlist.is_watched(quote.id, after):
            self.items.insert(
                {
                    "user_id": user_id,
                    "coin_id": quote.id,
                    "name": quote.name,
                    "symbol": quote.symbol,
                    "image_url": quote.image or None,
                    "created_at": utcnow().isoformat(),
                }
            )
            logger.info("Watching %s for %s", quote.id, user_id)
            return True

        for record in self.items.list({"user_id": user_id, "coin_id": quote.id}):
            self.items.delete(record["id"])
        logger.info("Stopped watching %s for %s", quote.id, user_id)
        return False

    def remove(self, item_id: str) -> bool:
        return self.items.delete(item_id)
