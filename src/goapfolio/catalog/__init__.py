"""Shipped portfolio analysis catalog."""

from goapfolio.core.models import Catalog

from .actions import PORTFOLIO_ACTIONS
from .goals import PORTFOLIO_GOALS


def portfolio_catalog() -> Catalog:
    """Return the catalog of portfolio analysis actions and goals."""
    return Catalog(actions=PORTFOLIO_ACTIONS, goals=PORTFOLIO_GOALS)


__all__ = ["PORTFOLIO_ACTIONS", "PORTFOLIO_GOALS", "portfolio_catalog"]
