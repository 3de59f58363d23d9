"""
Table Schemas
=============
Required columns for the three base tables and the validation used on
entry to every stage.
"""

import pandas as pd
from typing import Iterable, List


CUSTOMER_COLUMNS = ['CustomerID', 'Age', 'Gender', 'Location', 'JoinDate']
PRODUCT_COLUMNS = ['ProductID', 'ProductName', 'Category', 'StockLevel', 'Price']
SALES_COLUMNS = [
    'TransactionID', 'CustomerID', 'ProductID',
    'QuantityPurchased', 'TransactionDate', 'Price'
]

DEDUP_KEY = ['ProductID', 'CustomerID', 'TransactionDate']


class SchemaError(ValueError):
    """Raised when an input table is missing required columns."""

    def __init__(self, table: str, missing: List[str]):
        self.table = table
        self.missing = missing
        super().__init__(f"{table} table is missing columns: {', '.join(missing)}")


def validate_columns(df: pd.DataFrame, required: Iterable[str], table: str) -> None:
    """Raise SchemaError if any required column is absent from df."""
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaError(table, missing)


def join_sales_products(sales_df: pd.DataFrame, products_df: pd.DataFrame) -> pd.DataFrame:
    """
    Inner join sales to products on ProductID.

    The product list price is exposed as ProductPrice so that Price keeps
    meaning the transaction price.
    """
    products = products_df.rename(columns={'Price': 'ProductPrice'})
    return sales_df.merge(products, on='ProductID', how='inner')


def add_sale_value(sales_df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of sales with SaleValue = QuantityPurchased * Price."""
    df = sales_df.copy()
    df['SaleValue'] = df['QuantityPurchased'] * df['Price']
    return df
