#!/usr/bin/env python3
"""
Master Pipeline Orchestration Script

Runs one configured analysis end to end:
1. Load the table (path or URL) and validate the configured columns
2. Normalize: wide → long reshape (or date parsing for incident rows),
   year/month, derived flags, category buckets
3. Aggregate metrics per group
4. Fit the configured model (linear or logistic)
5. Save aggregates (CSV) and model summary (JSON) to the gold layer

Any pipeline error aborts the run with exit code 1.

Usage:
    # COVID-19 time series: continent totals + linear trend
    python scripts/run_pipeline.py config/examples/covid_global_cases.json

    # NYPD shootings: borough/year counts + logistic model of fatal outcome
    python scripts/run_pipeline.py config/examples/nypd_shootings.json --output-dir /tmp/out

    # Installed entry point
    incident-pipeline config/examples/nypd_shootings.json --no-save
"""

import argparse
import dataclasses
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.append(str(PROJECT_ROOT))

from config.paths import GOLD, ensure_directories
from config.pipeline_config import PipelineConfig
from data_engineering.clean.reshape import (
    reshape_wide_to_long, parse_dates, add_date_parts, elapsed_days
)
from data_engineering.datasets.aggregate import (
    group_sum, group_count, daily_increments, sort_groups
)
from data_engineering.download.table_loader import load_table, require_columns
from data_engineering.features.categorize import bucket_column, rules_from_config as category_rules
from data_engineering.features.derive_fields import derive_table_fields, rules_from_config as flag_rules
from data_engineering.utils.errors import PipelineError
from data_engineering.utils.validation import validate_table, validate_binary_outcome, check_data_quality
from ml_engineering.evaluation.metrics import evaluate_linear, evaluate_logistic
from ml_engineering.models.regression import (
    FittedModel, fit_linear, fit_logistic, probability_bins, print_model, LINEAR
)
from ml_engineering.preprocessing.encoding import check_for_leakage
from ml_engineering.utils.persistence import save_model_summary


@dataclass
class PipelineResult:
    """Outputs of one run"""
    tidy: pd.DataFrame
    aggregates: Optional[pd.DataFrame] = None
    model: Optional[FittedModel] = None
    metrics: Optional[Dict[str, float]] = None
    aggregates_path: Optional[Path] = None
    model_path: Optional[Path] = None


def print_header(text):
    """Print a formatted header"""
    print('\n' + '=' * 80)
    print(text.center(80))
    print('=' * 80 + '\n')


def required_columns(config: PipelineConfig):
    """Raw columns the configuration refers to"""
    if config.layout == 'wide':
        return list(config.id_columns)

    columns = list(config.id_columns)
    if config.date_column:
        columns.append(config.date_column)
    if config.category_source:
        columns.append(config.category_source)
    return list(dict.fromkeys(columns))


def normalize(df: pd.DataFrame, config: PipelineConfig, verbose: bool = True) -> pd.DataFrame:
    """Reshape / parse dates, then derive flags and category buckets"""
    if config.layout == 'wide':
        tidy = reshape_wide_to_long(
            df,
            config.id_columns,
            date_column_matcher=config.date_column_matcher,
            date_format=config.date_format,
            date_column=config.date_column,
            value_column=config.value_column
        )
        if verbose:
            print(f'  ✓ Reshaped to long form: {len(tidy):,} rows')

        if config.cumulative:
            tidy = daily_increments(
                tidy, config.id_columns, config.date_column, config.value_column,
                output_column=f'new_{config.value_column}'
            )
            if verbose:
                print(f'  ✓ Converted cumulative {config.value_column} to new_{config.value_column}')
    else:
        tidy = parse_dates(df, config.date_column, config.date_format)
        if verbose:
            print(f'  ✓ Parsed {config.date_column} with format {config.date_format}')

    tidy = add_date_parts(tidy, config.date_column)

    if config.flag_rules:
        tidy = derive_table_fields(tidy, flag_rules(config.flag_rules))
        if verbose:
            print(f'  ✓ Derived flags: {", ".join(config.flag_rules)}')

    if config.category_source:
        tidy = bucket_column(
            tidy, config.category_source, category_rules(config.category_rules),
            output_column=config.category_column
        )
        if verbose:
            counts = tidy[config.category_column].value_counts()
            print(f'  ✓ Bucketed {config.category_source} → {config.category_column}:')
            for label, count in counts.items():
                print(f'     - {label}: {count:,}')

    return tidy


def aggregate(tidy: pd.DataFrame, config: PipelineConfig) -> pd.DataFrame:
    """group_sum over configured metrics, or row counts when none are given"""
    metrics = list(config.metric_columns)
    if not metrics and config.layout == 'wide':
        metrics = [config.value_column]

    if metrics:
        rows = group_sum(tidy, config.group_by_columns, metrics)
    else:
        rows = group_count(tidy, config.group_by_columns)

    return sort_groups(rows, config.group_by_columns)


def fit_model(tidy: pd.DataFrame, aggregates: Optional[pd.DataFrame], config: PipelineConfig, verbose: bool = True):
    """Fit the configured model; returns (model, metrics)"""
    if config.model_type == LINEAR:
        data = aggregates if aggregates is not None else tidy
        require_columns(data, [config.date_column, config.outcome_column], context='linear model')
        x = elapsed_days(data[config.date_column])
        y = data[config.outcome_column].to_numpy(dtype=float)

        model = fit_linear(x, y)
        if verbose:
            print_model(model)
        metrics = evaluate_linear(model, x, y, name=config.name, verbose=verbose)
        return model, metrics

    check_for_leakage(config.predictor_columns, config.outcome_column)
    require_columns(tidy, list(config.predictor_columns) + [config.outcome_column], context='logistic model')
    validate_binary_outcome(tidy, config.outcome_column, name=config.name)

    features = tidy[list(config.predictor_columns)]
    outcome = tidy[config.outcome_column]
    model = fit_logistic(
        features, outcome,
        max_iter=config.max_iter,
        tol=config.tol,
        allow_separation=config.allow_separation,
        verbose=verbose
    )
    metrics = evaluate_logistic(model, features, outcome, name=config.name, verbose=verbose)

    if verbose:
        bins = probability_bins(model.predict(features), bins=10)
        print('\nPredicted probability bins:')
        for interval, count in bins.items():
            print(f'  {str(interval):<18} {count:>8,}')

    return model, metrics


def run_pipeline(config: PipelineConfig, save: bool = True, verbose: bool = True) -> PipelineResult:
    """
    Run one configured analysis end to end

    Raises:
        PipelineError subclasses; nothing is retried or swallowed
    """
    if verbose:
        print_header(f'STEP 1: LOAD {config.name.upper()}')

    df = load_table(config.source, required_columns=required_columns(config), sep=config.sep, verbose=verbose)
    validate_table(df, required_columns(config), name=config.name, verbose=verbose)
    if verbose:
        check_data_quality(df, config.name)

    if verbose:
        print_header('STEP 2: NORMALIZE')
    tidy = normalize(df, config, verbose=verbose)

    result = PipelineResult(tidy=tidy)

    if config.group_by_columns:
        if verbose:
            print_header('STEP 3: AGGREGATE')
        result.aggregates = aggregate(tidy, config)
        if verbose:
            print(f'  ✓ {len(result.aggregates):,} groups by {config.group_by_columns}')
            print(result.aggregates.head(10).to_string(index=False))

    if config.model_type:
        if verbose:
            print_header(f'STEP 4: FIT {config.model_type.upper()} MODEL')
        result.model, result.metrics = fit_model(tidy, result.aggregates, config, verbose=verbose)

    if save:
        if verbose:
            print_header('STEP 5: SAVE')
        output_dir = Path(config.output_dir)
        if output_dir == GOLD:
            ensure_directories()

        if result.aggregates is not None:
            aggregates_dir = output_dir / 'aggregates'
            aggregates_dir.mkdir(parents=True, exist_ok=True)
            result.aggregates_path = aggregates_dir / f'{config.name}_aggregates.csv'
            result.aggregates.to_csv(result.aggregates_path, index=False)
            if verbose:
                print(f'💾 Saved aggregates to {result.aggregates_path}')

        if result.model is not None:
            result.model_path = save_model_summary(
                result.model, config.name, metrics=result.metrics,
                output_dir=output_dir / 'models', verbose=verbose
            )

    return result


def main(argv=None):
    """Main pipeline orchestration"""
    parser = argparse.ArgumentParser(
        description='Run a configured incident/time-series analysis end to end',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # COVID-19 global cases by continent with a linear trend
  python scripts/run_pipeline.py config/examples/covid_global_cases.json

  # NYPD shootings with a logistic model of fatal outcome
  python scripts/run_pipeline.py config/examples/nypd_shootings.json

  # Do not write outputs
  python scripts/run_pipeline.py config/examples/nypd_shootings.json --no-save
        """
    )

    parser.add_argument('config', type=Path, help='Pipeline configuration (JSON)')
    parser.add_argument('--output-dir', type=Path, help='Override output_dir from the configuration')
    parser.add_argument('--no-save', action='store_true', help='Do not write aggregates or model summary')
    parser.add_argument('--quiet', action='store_true', help='Suppress progress messages')

    args = parser.parse_args(argv)
    verbose = not args.quiet

    start_time = datetime.now()

    try:
        config = PipelineConfig.from_json(args.config)
        if args.output_dir:
            config = dataclasses.replace(config, output_dir=args.output_dir)

        if verbose:
            print_header(f'INCIDENT TRENDS PIPELINE: {config.name}')
            print(f'Started: {start_time.strftime("%Y-%m-%d %H:%M:%S")}')
            print(f'Source:  {config.source}')

        run_pipeline(config, save=not args.no_save, verbose=verbose)

    except PipelineError as e:
        print(f'\n❌ Pipeline aborted: {type(e).__name__}: {e}')
        return 1

    if verbose:
        print_header('PIPELINE SUMMARY')
        print(f'Duration: {datetime.now() - start_time}')
        print('✓ PIPELINE COMPLETED SUCCESSFULLY')

    return 0


if __name__ == '__main__':
    sys.exit(main())
