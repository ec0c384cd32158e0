#!/usr/bin/env python3
"""
Load a delimited table from a local path or an HTTP(S) URL

Public datasets (JHU CSSE COVID-19 time series, NYPD shooting incidents, ...)
are published as CSV files on GitHub or open data portals. This module fetches
one of them into a DataFrame and checks that the configured columns exist.

There is no retry: a failed load aborts the run.

Usage:
    python -m data_engineering.download.table_loader URL_OR_PATH --require Country/Region
    python -m data_engineering.download.table_loader data.csv --save data/bronze/data.csv
"""

import argparse
import io
import sys
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd
import requests

from data_engineering.utils.errors import SchemaMismatch, SourceUnavailable, PipelineError

REQUEST_TIMEOUT = 60  # seconds


def is_url(source) -> bool:
    """True for http:// and https:// sources"""
    return str(source).lower().startswith(('http://', 'https://'))


def fetch_text(url: str, timeout: int = REQUEST_TIMEOUT) -> str:
    """GET a URL and return the body as text"""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise SourceUnavailable(url, str(e)) from e
    return response.text


def require_columns(table: pd.DataFrame, columns: Iterable[str], context: Optional[str] = None):
    """Raise SchemaMismatch listing any of `columns` absent from `table`"""
    missing = [c for c in columns if c not in table.columns]
    if missing:
        raise SchemaMismatch(missing, source=context)


def load_table(
    source,
    required_columns: Optional[Iterable[str]] = None,
    sep: str = ',',
    timeout: int = REQUEST_TIMEOUT,
    verbose: bool = True
) -> pd.DataFrame:
    """
    Load a delimited table into memory

    Args:
        source: Local path or http(s) URL
        required_columns: Columns that must be present (dataset-specific configuration)
        sep: Field delimiter
        timeout: HTTP timeout in seconds (URLs only)
        verbose: Print progress

    Returns:
        DataFrame with one row per record

    Raises:
        SourceUnavailable: Network/file error, or the file cannot be parsed
        SchemaMismatch: One of required_columns is missing
    """
    if verbose:
        print(f'\n📥 Loading {source}...')

    if is_url(source):
        text = fetch_text(str(source), timeout=timeout)
        reader_input = io.StringIO(text)
    else:
        path = Path(source)
        if not path.exists():
            raise SourceUnavailable(source, 'file not found')
        reader_input = path

    try:
        df = pd.read_csv(reader_input, sep=sep)
    except pd.errors.EmptyDataError as e:
        raise SourceUnavailable(source, 'empty file') from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise SourceUnavailable(source, f'unreadable: {e}') from e

    if required_columns:
        require_columns(df, required_columns, context=str(source))

    if verbose:
        print(f'  ✓ Loaded {len(df):,} rows x {len(df.columns)} columns')

    return df


def main():
    parser = argparse.ArgumentParser(
        description='Load a delimited table from a path or URL and report its shape',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check that a remote table has the expected columns
  python -m data_engineering.download.table_loader https://example.org/data.csv --require Country/Region

  # Keep a raw copy in the bronze layer
  python -m data_engineering.download.table_loader https://example.org/data.csv --save data/bronze/data.csv
        """
    )
    parser.add_argument('source', help='Path or http(s) URL of the table')
    parser.add_argument('--require', nargs='+', default=None,
                        help='Columns that must be present')
    parser.add_argument('--sep', default=',', help='Field delimiter (default: ",")')
    parser.add_argument('--save', type=Path, help='Write the loaded table to this CSV path')

    args = parser.parse_args()

    try:
        df = load_table(args.source, required_columns=args.require, sep=args.sep)
    except PipelineError as e:
        print(f'\n❌ {e}')
        sys.exit(1)

    if args.save:
        args.save.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(args.save, index=False)
        print(f'\n💾 Saved to: {args.save}')

    print('\n✅ Done!')


if __name__ == '__main__':
    main()
