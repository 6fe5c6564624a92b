"""OpenSearch resource searcher."""

from querysvc.adapters.opensearch.adapter import OpenSearchResourceSearcher

__all__ = ["OpenSearchResourceSearcher"]
