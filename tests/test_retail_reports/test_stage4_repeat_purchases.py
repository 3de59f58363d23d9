"""
Tests for Stage 4: Repeat-Purchase Detection
============================================
"""

import pytest
import pandas as pd
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.retail_reports.stage4_repeat_purchases import RepeatPurchasePipeline


@pytest.fixture
def customers():
    return pd.DataFrame({
        'CustomerID': [1, 2, 3],
        'Age': [25, 40, 61],
        'Gender': ['F', 'M', 'F'],
        'Location': ['East', 'West', 'North'],
        'JoinDate': ['01/01/20'] * 3,
    })


@pytest.fixture
def products():
    return pd.DataFrame({
        'ProductID': [10, 11],
        'ProductName': ['Kettle', 'Toaster'],
        'Category': ['Home', 'Home'],
        'StockLevel': [5, 5],
        'Price': [30.0, 45.0],
    })


class TestRepeatPurchasePipeline:
    """Test repeat purchase detection."""

    def test_init(self):
        assert RepeatPurchasePipeline().min_purchases == 2

    def test_repeats_only(self, customers, products, sales_factory):
        sales = sales_factory([
            (1, 1, 10, 1, 30.0, '01/01/23'),
            (2, 1, 10, 1, 30.0, '02/01/23'),
            (3, 1, 10, 2, 30.0, '03/01/23'),
            (4, 1, 11, 1, 45.0, '01/01/23'),
            (5, 2, 10, 1, 30.0, '01/01/23'),
            (6, 2, 10, 1, 30.0, '05/01/23'),
            (7, 3, 11, 1, 45.0, '01/01/23'),
        ])
        result = RepeatPurchasePipeline().run(customers, products, sales)

        assert list(result.columns) == [
            'CustomerID', 'Age', 'ProductID', 'ProductName', 'Category', 'TimesPurchased'
        ]
        assert result['CustomerID'].tolist() == [1, 2]
        assert result['TimesPurchased'].tolist() == [3, 2]
        assert result.iloc[0]['Age'] == 25
        assert result.iloc[0]['ProductName'] == 'Kettle'

    def test_no_repeats(self, customers, products, sales_factory):
        sales = sales_factory([
            (1, 1, 10, 1, 30.0),
            (2, 2, 11, 1, 45.0),
        ])
        result = RepeatPurchasePipeline().run(customers, products, sales)
        assert len(result) == 0

    def test_unknown_customer_dropped(self, customers, products, sales_factory):
        """Test repeats for customers absent from Customers are excluded."""
        sales = sales_factory([
            (1, 99, 10, 1, 30.0, '01/01/23'),
            (2, 99, 10, 1, 30.0, '02/01/23'),
        ])
        result = RepeatPurchasePipeline().run(customers, products, sales)
        assert len(result) == 0

    def test_synthetic_counts_strictly_repeat(self, customers_df, products_df, sales_df):
        result = RepeatPurchasePipeline().run(customers_df, products_df, sales_df)

        assert (result['TimesPurchased'] >= 2).all()
        assert result['TimesPurchased'].is_monotonic_decreasing
        assert not result.duplicated(['CustomerID', 'ProductID']).any()
