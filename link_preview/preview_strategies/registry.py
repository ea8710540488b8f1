from collections.abc import Iterable

from link_preview.core.logging import get_logger
from link_preview.preview_strategies.base_strategy import LinkKind, PreviewStrategy

logger = get_logger(__name__)

# First match wins; GENERIC accepts everything and must stay last.
LINK_KIND_PRIORITY = (
    LinkKind.STICKER_PACK,
    LinkKind.GROUP_INVITE,
    LinkKind.CALL_LINK,
    LinkKind.GENERIC,
)


class StrategyRegistry:
    """Fixed registry holding exactly one strategy per link kind."""

    def __init__(self, strategies: Iterable[PreviewStrategy]):
        by_kind: dict[LinkKind, PreviewStrategy] = {}
        for strategy in strategies:
            if strategy.kind in by_kind:
                raise ValueError(f"Duplicate strategy for {strategy.kind.value}")
            by_kind[strategy.kind] = strategy

        missing = [kind.value for kind in LINK_KIND_PRIORITY if kind not in by_kind]
        if missing:
            raise ValueError(f"Missing strategies for: {', '.join(missing)}")

        self._strategies = tuple(by_kind[kind] for kind in LINK_KIND_PRIORITY)
        for strategy in self._strategies:
            logger.debug(f"Registered strategy: {strategy.__class__.__name__}")

    def get_strategy(self, url: str) -> PreviewStrategy:
        """Get the strategy responsible for a URL."""
        for strategy in self._strategies:
            if strategy.can_handle_url(url):
                logger.debug(f"Using {strategy.__class__.__name__} for {url}")
                return strategy
        # Unreachable while the generic strategy accepts every URL.
        return self._strategies[-1]

    def classify(self, url: str) -> LinkKind:
        return self.get_strategy(url).kind

    def list_strategies(self) -> list[str]:
        """List all registered strategy names in priority order."""
        return [s.__class__.__name__ for s in self._strategies]
