"""
Reporting Pipeline Runner
=========================
Loads the base tables, cleans them and runs every report stage.

Usage:
    python -m src.retail_reports.run_pipeline --data-dir data/raw
    python -m src.retail_reports.run_pipeline --only-report customer_segments
    python -m src.retail_reports.run_pipeline --format parquet --top-n 5

Input files (in --data-dir):
    - customers.csv
    - products.csv
    - sales.csv

Output files (in --output-dir), one per report:
    - product_null_audit, customer_null_audit
    - extreme_price_products, extreme_quantity_transactions,
      best_seller_per_category
    - age_group_spending
    - repeat_purchases
    - customer_segments
    - sales_by_location, product_extremes_by_location
"""

import argparse
import logging
import time
import pandas as pd
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, Optional

from .config import ReportConfig, OUTPUT_FORMATS
from .schema import CUSTOMER_COLUMNS, PRODUCT_COLUMNS, SALES_COLUMNS, validate_columns
from .stage1_data_cleaning import DataCleaningPipeline
from .stage2_product_insights import ProductInsightPipeline
from .stage3_demographics import DemographicAggregationPipeline
from .stage4_repeat_purchases import RepeatPurchasePipeline
from .stage5_customer_segments import CustomerSegmentationPipeline
from .stage6_location_sales import LocationSalesPipeline

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

CLEANING_REPORTS = ['product_null_audit', 'customer_null_audit']

# Report stage -> report tables it produces
REPORT_STAGES = {
    'product_insights': [
        'extreme_price_products',
        'extreme_quantity_transactions',
        'best_seller_per_category'
    ],
    'demographics': ['age_group_spending'],
    'repeat_purchases': ['repeat_purchases'],
    'customer_segments': ['customer_segments'],
    'location_sales': ['sales_by_location', 'product_extremes_by_location'],
}


def load_tables(config: ReportConfig) -> Dict[str, pd.DataFrame]:
    """
    Load customers, products and sales CSVs from config.data_dir.

    Raises FileNotFoundError for a missing file and SchemaError for a
    file lacking required columns.
    """
    data_dir = Path(config.data_dir)
    sources = [
        ('customers', config.customers_file, CUSTOMER_COLUMNS, 'Customers'),
        ('products', config.products_file, PRODUCT_COLUMNS, 'Products'),
        ('sales', config.sales_file, SALES_COLUMNS, 'Sales'),
    ]

    tables = {}
    for key, filename, required, table in sources:
        path = data_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"{table} file not found: {path}")
        df = pd.read_csv(path)
        validate_columns(df, required, table)
        tables[key] = df
        logger.info(f"Loaded {len(df):,} {table.lower()} from {path}")

    return tables


def save_reports(
    reports: Dict[str, pd.DataFrame],
    output_dir: Path,
    output_format: str = 'csv'
) -> Dict[str, Path]:
    """Write each report to <output_dir>/<name>.<format>."""
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}
    for name, df in reports.items():
        path = output_dir / f'{name}.{output_format}'
        if output_format == 'parquet':
            df.to_parquet(path, index=False)
        else:
            df.to_csv(path, index=False)
        paths[name] = path

    return paths


class ReportingPipeline:
    """
    Orchestrates the reporting pipeline.

    Cleaning always runs first; report stages then run independently on
    the cleaned tables.
    """

    def __init__(self, config: Optional[ReportConfig] = None):
        self.config = config or ReportConfig()

    def run(
        self,
        customers_df: pd.DataFrame,
        products_df: pd.DataFrame,
        sales_df: pd.DataFrame,
        only_reports: Optional[Iterable[str]] = None,
        skip_reports: Optional[Iterable[str]] = None
    ) -> Dict[str, pd.DataFrame]:
        """
        Run cleaning and the selected report stages.

        Parameters
        ----------
        customers_df, products_df, sales_df : pd.DataFrame
            Base tables
        only_reports : iterable of str, optional
            If provided, only run these stages (keys of REPORT_STAGES)
        skip_reports : iterable of str, optional
            Stages to skip

        Returns
        -------
        dict
            Report name -> report table, audits included
        """
        stages = self._select_stages(only_reports, skip_reports)

        print("\n" + "=" * 70)
        print("RETAIL REPORTING PIPELINE")
        print("=" * 70)
        print(f"\nCustomers: {len(customers_df):,}")
        print(f"Products: {len(products_df):,}")
        print(f"Sales: {len(sales_df):,}")
        print(f"Reports: {', '.join(stages) if stages else '(cleaning only)'}")

        total_start = time.time()

        print("\n" + "-" * 70)
        start = time.time()
        cleaner = DataCleaningPipeline(location_sentinel=self.config.location_sentinel)
        cleaned = cleaner.run(customers_df, products_df, sales_df)
        print(f"Stage 1 completed in {time.time() - start:.1f}s")

        customers = cleaned['customers']
        products = cleaned['products']
        sales = cleaned['sales']

        reports = {name: cleaned[name] for name in CLEANING_REPORTS}

        for stage in stages:
            print("\n" + "-" * 70)
            start = time.time()
            reports.update(self._run_stage(stage, customers, products, sales))
            print(f"{stage} completed in {time.time() - start:.1f}s")

        total_time = time.time() - total_start
        print("\n" + "=" * 70)
        print(f"PIPELINE COMPLETE - Total time: {total_time:.1f}s")
        print("=" * 70)

        self._print_summary(reports)

        return reports

    def _select_stages(
        self,
        only_reports: Optional[Iterable[str]],
        skip_reports: Optional[Iterable[str]]
    ) -> list:
        """Resolve the ordered list of report stages to run."""
        requested = list(only_reports) if only_reports is not None else list(REPORT_STAGES)
        skipped = set(skip_reports or [])

        unknown = [s for s in list(requested) + list(skipped) if s not in REPORT_STAGES]
        if unknown:
            raise ValueError(
                f"Unknown report(s): {', '.join(unknown)} "
                f"(expected any of {', '.join(REPORT_STAGES)})"
            )

        return [s for s in REPORT_STAGES if s in requested and s not in skipped]

    def _run_stage(
        self,
        stage: str,
        customers: pd.DataFrame,
        products: pd.DataFrame,
        sales: pd.DataFrame
    ) -> Dict[str, pd.DataFrame]:
        """Run a single report stage."""
        if stage == 'product_insights':
            return ProductInsightPipeline().run(sales, products)
        if stage == 'demographics':
            pipeline = DemographicAggregationPipeline(age_groups=self.config.age_groups)
            return {'age_group_spending': pipeline.run(customers, sales)}
        if stage == 'repeat_purchases':
            return {'repeat_purchases': RepeatPurchasePipeline().run(customers, products, sales)}
        if stage == 'customer_segments':
            pipeline = CustomerSegmentationPipeline(
                top_n=self.config.top_n_per_segment,
                spend_segments=self.config.spend_segments
            )
            return {'customer_segments': pipeline.run(sales)}
        if stage == 'location_sales':
            return LocationSalesPipeline().run(customers, sales)
        raise ValueError(f"Unknown report stage: {stage}")

    def _print_summary(self, reports: Dict[str, pd.DataFrame]):
        """Print row counts per report."""
        print("\nReports:")
        for name, df in reports.items():
            print(f"  - {name}: {len(df):,} rows")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Run the retail reporting pipeline'
    )
    parser.add_argument(
        '--data-dir',
        type=str,
        default=ReportConfig.data_dir,
        help='Directory containing customers.csv, products.csv and sales.csv'
    )
    parser.add_argument(
        '--output-dir',
        type=str,
        default=ReportConfig.output_dir,
        help='Directory for report output files'
    )
    parser.add_argument(
        '--format',
        type=str,
        choices=OUTPUT_FORMATS,
        default=ReportConfig.output_format,
        help='Report file format (default: csv)'
    )
    parser.add_argument(
        '--top-n',
        type=int,
        default=ReportConfig.top_n_per_segment,
        help='Customers kept per spend segment (default: 3)'
    )
    parser.add_argument(
        '--only-report',
        type=str,
        nargs='+',
        choices=list(REPORT_STAGES),
        default=None,
        help='Only run these report stages'
    )
    parser.add_argument(
        '--skip-report',
        type=str,
        nargs='+',
        choices=list(REPORT_STAGES),
        default=[],
        help='Report stage(s) to skip'
    )
    args = parser.parse_args(argv)

    config = ReportConfig(
        data_dir=args.data_dir,
        output_dir=args.output_dir,
        output_format=args.format,
        top_n_per_segment=args.top_n
    )
    logger.info(f"Config: {asdict(config)}")

    tables = load_tables(config)

    pipeline = ReportingPipeline(config)
    reports = pipeline.run(
        tables['customers'],
        tables['products'],
        tables['sales'],
        only_reports=args.only_report,
        skip_reports=args.skip_report
    )

    paths = save_reports(reports, Path(config.output_dir), config.output_format)
    print(f"\nSaved {len(paths)} reports to: {config.output_dir}")

    return reports


if __name__ == '__main__':
    main()
