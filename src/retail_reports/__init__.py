"""
Retail Reports
==============
Batch reporting pipeline over the Customers, Products and Sales tables.

Stages:
1. Data Cleaning - Null audit, location normalization, sales deduplication
2. Product Insights - Price/quantity extremes, best seller per category
3. Demographic Aggregation - Quantity and spend per age band
4. Repeat-Purchase Detection - Customer-product pairs bought more than once
5. Customer Segmentation - Spend segments, top spenders per segment
6. Location Aggregation - Sales per location, best/worst product per location
"""

from .config import ReportConfig
from .schema import SchemaError
from .stage1_data_cleaning import DataCleaningPipeline
from .stage2_product_insights import ProductInsightPipeline
from .stage3_demographics import DemographicAggregationPipeline
from .stage4_repeat_purchases import RepeatPurchasePipeline
from .stage5_customer_segments import CustomerSegmentationPipeline
from .stage6_location_sales import LocationSalesPipeline

__all__ = [
    'ReportConfig',
    'SchemaError',
    'DataCleaningPipeline',
    'ProductInsightPipeline',
    'DemographicAggregationPipeline',
    'RepeatPurchasePipeline',
    'CustomerSegmentationPipeline',
    'LocationSalesPipeline'
]
