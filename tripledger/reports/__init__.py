"""Trip reports package."""

from tripledger.reports.summary import category_breakdown, summarize_members, total_spent

__all__ = ["category_breakdown", "summarize_members", "total_spent"]
