"""
Evaluation Script for the Reporting Pipeline
============================================
Checks invariants of the reports written by run_pipeline.

Metrics:
- Cleaning audit totals
- Age group and segment label validity
- Top-N bound and ordering per segment
- Location coverage and sentinel handling
"""

import pandas as pd
import numpy as np
from pathlib import Path
import json
import sys
from typing import Dict, Any

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.retail_reports.config import ReportConfig


def evaluate_audit(audit_df: pd.DataFrame) -> Dict[str, Any]:
    """
    Evaluate a null audit row.

    Returns total missing values and a score penalized per affected column.
    """
    metrics = {}

    counts = audit_df.iloc[0].to_dict() if len(audit_df) else {}
    metrics['missing_counts'] = {k: int(v) for k, v in counts.items()}
    metrics['total_missing'] = int(sum(counts.values()))
    metrics['columns_with_missing'] = int(sum(1 for v in counts.values() if v > 0))

    quality_score = 100
    if len(audit_df) != 1:
        quality_score = 0
    else:
        quality_score -= 10 * metrics['columns_with_missing']

    metrics['quality_score'] = max(quality_score, 0)

    return metrics


def evaluate_age_groups(age_df: pd.DataFrame, config: ReportConfig) -> Dict[str, Any]:
    """
    Evaluate the age group spending report.

    Returns metrics on label validity, ordering and totals.
    """
    metrics = {}
    valid_labels = {label for label, _ in config.age_groups}

    metrics['num_groups'] = len(age_df)
    metrics['invalid_labels'] = int((~age_df['AgeGroup'].isin(valid_labels)).sum())
    metrics['duplicate_labels'] = int(age_df['AgeGroup'].duplicated().sum())
    metrics['sorted_by_spending'] = bool(age_df['TotalSpending'].is_monotonic_decreasing)
    metrics['total_spending'] = float(age_df['TotalSpending'].sum())

    quality_score = 100
    if metrics['invalid_labels'] > 0:
        quality_score -= 40
    if metrics['duplicate_labels'] > 0:
        quality_score -= 30
    if not metrics['sorted_by_spending']:
        quality_score -= 20

    metrics['quality_score'] = quality_score

    return metrics


def evaluate_segments(segments_df: pd.DataFrame, config: ReportConfig) -> Dict[str, Any]:
    """
    Evaluate the customer segment report.

    Returns metrics on label validity, top-N bound and per-segment ordering.
    """
    metrics = {}

    metrics['total_rows'] = len(segments_df)
    metrics['unique_customers'] = int(segments_df['CustomerID'].nunique())

    expected = segments_df['TotalSpent'].map(config.get_segment)
    metrics['misclassified'] = int((expected != segments_df['Segment']).sum())

    per_segment = segments_df.groupby('Segment').size()
    metrics['rows_per_segment'] = {k: int(v) for k, v in per_segment.items()}
    metrics['over_top_n'] = int((per_segment > config.top_n_per_segment).sum())

    ordered = segments_df.groupby('Segment')['TotalSpent'].apply(
        lambda s: s.is_monotonic_decreasing
    )
    metrics['segments_ordered'] = float(ordered.mean()) if len(ordered) else 1.0

    quality_score = 100
    if metrics['misclassified'] > 0:
        quality_score -= 40
    if metrics['over_top_n'] > 0:
        quality_score -= 30
    if metrics['segments_ordered'] < 1.0:
        quality_score -= 20
    if metrics['unique_customers'] != metrics['total_rows']:
        quality_score -= 10

    metrics['quality_score'] = quality_score

    return metrics


def evaluate_locations(
    location_df: pd.DataFrame,
    extremes_df: pd.DataFrame,
    config: ReportConfig
) -> Dict[str, Any]:
    """
    Evaluate the location reports.

    Returns metrics on coverage, blank handling and Highest/Lowest pairing.
    """
    metrics = {}

    locations = location_df['Location']
    metrics['num_locations'] = len(location_df)
    metrics['empty_locations'] = int((locations.isna() | (locations == '')).sum())
    metrics['has_sentinel'] = bool((locations == config.location_sentinel).any())
    metrics['sentinel_share'] = float(
        location_df.loc[locations == config.location_sentinel, 'TotalSales'].sum()
        / location_df['TotalSales'].sum()
    ) if location_df['TotalSales'].sum() else 0.0

    tags = extremes_df.groupby('SalesRank')['Location'].nunique().to_dict()
    metrics['highest_locations'] = int(tags.get('Highest', 0))
    metrics['lowest_locations'] = int(tags.get('Lowest', 0))

    quality_score = 100
    if metrics['empty_locations'] > 0:
        quality_score -= 40
    if metrics['highest_locations'] != metrics['num_locations']:
        quality_score -= 20
    if metrics['lowest_locations'] != metrics['num_locations']:
        quality_score -= 20

    metrics['quality_score'] = quality_score

    return metrics


def _read_report(reports_dir: Path, name: str) -> pd.DataFrame:
    """Read a report written as CSV or Parquet; None if absent."""
    parquet_path = reports_dir / f'{name}.parquet'
    csv_path = reports_dir / f'{name}.csv'
    if parquet_path.exists():
        return pd.read_parquet(parquet_path)
    if csv_path.exists():
        return pd.read_csv(csv_path, keep_default_na=False)
    return None


def run_evaluation(reports_dir: Path, config: ReportConfig = None) -> Dict[str, Dict[str, Any]]:
    """
    Run evaluation over a report directory.

    Parameters
    ----------
    reports_dir : Path
        Directory holding the reports written by run_pipeline
    config : ReportConfig, optional
        Thresholds the reports were produced with

    Returns
    -------
    Dict containing evaluation results for each report
    """
    config = config or ReportConfig()
    reports_dir = Path(reports_dir)
    results = {}

    print("=" * 60)
    print("Reporting Pipeline Evaluation")
    print("=" * 60)

    checks = [
        ('product_null_audit', lambda df: evaluate_audit(df)),
        ('customer_null_audit', lambda df: evaluate_audit(df)),
        ('age_group_spending', lambda df: evaluate_age_groups(df, config)),
        ('customer_segments', lambda df: evaluate_segments(df, config)),
    ]

    for name, evaluate in checks:
        print(f"\n--- {name} ---")
        df = _read_report(reports_dir, name)
        if df is None:
            print(f"  [MISSING] {name}")
            results[name] = {'quality_score': 0, 'error': 'file not found'}
            continue
        results[name] = evaluate(df)
        print(f"  Rows: {len(df):,}")
        print(f"  Quality Score: {results[name]['quality_score']}/100")

    print("\n--- locations ---")
    location_df = _read_report(reports_dir, 'sales_by_location')
    extremes_df = _read_report(reports_dir, 'product_extremes_by_location')
    if location_df is not None and extremes_df is not None:
        results['locations'] = evaluate_locations(location_df, extremes_df, config)
        print(f"  Locations: {results['locations']['num_locations']:,}")
        print(f"  Quality Score: {results['locations']['quality_score']}/100")
    else:
        print("  [MISSING] sales_by_location / product_extremes_by_location")
        results['locations'] = {'quality_score': 0, 'error': 'file not found'}

    # Overall score
    scores = [r['quality_score'] for r in results.values() if 'quality_score' in r]
    overall_score = float(np.mean(scores)) if scores else 0.0

    print("\n" + "=" * 60)
    print(f"Overall Quality Score: {overall_score:.1f}/100")
    print("=" * 60)

    results['overall'] = {
        'quality_score': overall_score,
        'reports_evaluated': len(scores),
        'all_files_present': all('error' not in r for r in results.values())
    }

    return results


def main():
    """Run evaluation and save results."""
    project_root = Path(__file__).parent.parent
    config = ReportConfig()
    results = run_evaluation(project_root / config.output_dir, config)

    output_path = project_root / 'evals' / 'report_results.json'
    with open(output_path, 'w') as f:
        json.dump(results, f, indent=2, default=str)

    print(f"\nResults saved to: {output_path}")

    return results


if __name__ == '__main__':
    main()
