"""
Stage 5: Customer Segmentation
==============================
Classifies customers by total spend and keeps the top spenders of each
segment.

Segments (inclusive lower bounds):
- High Spender: >= 10000
- Medium Spender: >= 5000
- Low Spender: >= 1000
- Occasional Buyer: everything else
"""

import logging
import numpy as np
import pandas as pd
from typing import Sequence, Tuple

from .config import DEFAULT_SPEND_SEGMENTS
from .ranking import row_number, top_n
from .schema import SALES_COLUMNS, validate_columns, add_sale_value

logger = logging.getLogger(__name__)


def assign_segments(
    total_spent: pd.Series,
    spend_segments: Sequence[Tuple[str, float]] = DEFAULT_SPEND_SEGMENTS
) -> pd.Series:
    """Map each total spend to its segment label."""
    conditions = [total_spent >= lower for _, lower in spend_segments[:-1]]
    labels = [label for label, _ in spend_segments[:-1]]
    if conditions:
        segments = np.select(conditions, labels, default=spend_segments[-1][0])
    else:
        segments = np.full(len(total_spent), spend_segments[-1][0])
    return pd.Series(segments, index=total_spent.index, name='Segment', dtype=object)


def summarize_customers(sales_df: pd.DataFrame) -> pd.DataFrame:
    """Per customer: TransactionCount, TotalSpent, TotalQuantity."""
    validate_columns(sales_df, SALES_COLUMNS, 'Sales')
    return add_sale_value(sales_df).groupby('CustomerID').agg(
        TransactionCount=('TransactionID', 'nunique'),
        TotalSpent=('SaleValue', 'sum'),
        TotalQuantity=('QuantityPurchased', 'sum')
    ).reset_index()


class CustomerSegmentationPipeline:
    """
    Spend-based customer segmentation.

    Steps:
    1. Aggregate transactions, spend and quantity per customer
    2. Assign a spend segment
    3. Rank within segment by spend, keep the top N
    """

    def __init__(
        self,
        top_n: int = 3,
        spend_segments: Sequence[Tuple[str, float]] = DEFAULT_SPEND_SEGMENTS
    ):
        """
        Parameters
        ----------
        top_n : int
            Customers kept per segment
        spend_segments : sequence of (label, lower bound)
            Segments checked in order; the last one is the catch-all
        """
        self.top_n = top_n
        self.spend_segments = tuple(spend_segments)

    def segment_customers(self, sales_df: pd.DataFrame) -> pd.DataFrame:
        """All customers with their segment, before the top-N cut."""
        customers = summarize_customers(sales_df)
        customers['Segment'] = assign_segments(customers['TotalSpent'], self.spend_segments)
        return customers

    def run(self, sales_df: pd.DataFrame) -> pd.DataFrame:
        """
        Parameters
        ----------
        sales_df : pd.DataFrame
            Cleaned sales

        Returns
        -------
        pd.DataFrame
            Segment, SpendRank, CustomerID, TransactionCount, TotalSpent,
            TotalQuantity; top N per segment ordered by Segment then SpendRank
        """
        logger.info("Stage 5: Customer Segmentation")

        customers = self.segment_customers(sales_df)
        counts = customers['Segment'].value_counts().to_dict()
        logger.info(f"Customers per segment: {counts}")

        ranked = row_number(
            customers,
            order_by='TotalSpent',
            ascending=False,
            partition_by='Segment',
            tie_breaker='CustomerID',
            rank_column='SpendRank'
        )
        top = top_n(ranked, self.top_n, rank_column='SpendRank')

        columns = [
            'Segment', 'SpendRank', 'CustomerID',
            'TransactionCount', 'TotalSpent', 'TotalQuantity'
        ]
        return top[columns].reset_index(drop=True)
