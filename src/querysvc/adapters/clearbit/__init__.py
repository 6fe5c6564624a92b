"""Clearbit organization searcher."""

from querysvc.adapters.clearbit.adapter import ClearbitOrganizationSearcher
from querysvc.adapters.clearbit.client import ClearbitClient

__all__ = ["ClearbitClient", "ClearbitOrganizationSearcher"]
