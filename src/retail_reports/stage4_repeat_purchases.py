"""
Stage 4: Repeat-Purchase Detection
==================================
Finds customer-product pairs bought in two or more transactions.
"""

import logging
import pandas as pd

from .schema import SALES_COLUMNS, validate_columns

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ['CustomerID', 'Age', 'ProductID', 'ProductName', 'Category', 'TimesPurchased']


class RepeatPurchasePipeline:
    """Detects repeat purchases of the same product by the same customer."""

    def __init__(self, min_purchases: int = 2):
        self.min_purchases = min_purchases

    def run(
        self,
        customers_df: pd.DataFrame,
        products_df: pd.DataFrame,
        sales_df: pd.DataFrame
    ) -> pd.DataFrame:
        """
        Returns
        -------
        pd.DataFrame
            CustomerID, Age, ProductID, ProductName, Category, TimesPurchased
            ordered by TimesPurchased descending
        """
        validate_columns(customers_df, ['CustomerID', 'Age'], 'Customers')
        validate_columns(products_df, ['ProductID', 'ProductName', 'Category'], 'Products')
        validate_columns(sales_df, SALES_COLUMNS, 'Sales')

        logger.info("Stage 4: Repeat-Purchase Detection")

        counts = sales_df.groupby(['CustomerID', 'ProductID']).size().reset_index(name='TimesPurchased')
        repeats = counts[counts['TimesPurchased'] >= self.min_purchases]

        repeats = repeats.merge(
            customers_df[['CustomerID', 'Age']], on='CustomerID', how='inner'
        ).merge(
            products_df[['ProductID', 'ProductName', 'Category']], on='ProductID', how='inner'
        )

        repeats = repeats.sort_values(
            ['TimesPurchased', 'CustomerID', 'ProductID'],
            ascending=[False, True, True],
            kind='mergesort'
        )

        logger.info(f"Repeat customer-product pairs: {len(repeats):,}")

        return repeats[OUTPUT_COLUMNS].reset_index(drop=True)
