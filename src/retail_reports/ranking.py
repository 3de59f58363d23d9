"""
Window Ranking
==============
ROW_NUMBER() OVER (PARTITION BY ... ORDER BY ...) for DataFrames.
"""

import pandas as pd
from typing import List, Optional, Sequence, Union


def row_number(
    df: pd.DataFrame,
    order_by: Union[str, Sequence[str]],
    ascending: Union[bool, Sequence[bool]] = True,
    partition_by: Optional[Union[str, Sequence[str]]] = None,
    tie_breaker: Optional[Union[str, Sequence[str]]] = None,
    rank_column: str = 'Rank'
) -> pd.DataFrame:
    """
    Number rows 1..n within each partition.

    Parameters
    ----------
    df : pd.DataFrame
        Input rows
    order_by : str or list of str
        Ordering key(s)
    ascending : bool or list of bool
        Sort direction per order key
    partition_by : str or list of str, optional
        Partition key(s); the whole frame is one partition if None
    tie_breaker : str or list of str, optional
        Extra ascending keys applied after order_by. Rows still tied keep
        their input order (stable sort).
    rank_column : str
        Name of the output rank column

    Returns
    -------
    pd.DataFrame
        Copy of df sorted by partition then rank, with rank_column added
    """
    order_by = _as_list(order_by)
    if isinstance(ascending, bool):
        ascending = [ascending] * len(order_by)
    else:
        ascending = list(ascending)
    if len(ascending) != len(order_by):
        raise ValueError("ascending must match the number of order_by keys")

    partition_by = _as_list(partition_by)
    tie_breaker = [c for c in _as_list(tie_breaker) if c not in order_by]

    sort_keys = partition_by + order_by + tie_breaker
    sort_dirs = [True] * len(partition_by) + ascending + [True] * len(tie_breaker)

    ranked = df.sort_values(sort_keys, ascending=sort_dirs, kind='mergesort')
    if partition_by:
        ranked[rank_column] = ranked.groupby(partition_by, dropna=False).cumcount() + 1
    else:
        ranked[rank_column] = range(1, len(ranked) + 1)

    return ranked


def top_n(ranked: pd.DataFrame, n: int, rank_column: str = 'Rank') -> pd.DataFrame:
    """Keep rows with rank <= n."""
    return ranked[ranked[rank_column] <= n]


def _as_list(cols) -> List[str]:
    if cols is None:
        return []
    if isinstance(cols, str):
        return [cols]
    return list(cols)
