"""Monthly report components computed over the transaction store."""

from backend.reporting.category_distribution import CategoryDistribution
from backend.reporting.combined_report import CombinedReportBuilder
from backend.reporting.price_histogram import PRICE_BUCKETS, PriceBucket, PriceHistogram, bucket_for_price
from backend.reporting.statistics import SummaryStatistics
from backend.reporting.transaction_query import TransactionQuery, build_search_predicate

__all__ = [
    "CategoryDistribution",
    "CombinedReportBuilder",
    "PRICE_BUCKETS",
    "PriceBucket",
    "PriceHistogram",
    "SummaryStatistics",
    "TransactionQuery",
    "bucket_for_price",
    "build_search_predicate",
]
