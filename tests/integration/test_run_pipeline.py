"""
End-to-end runs of the pipeline on small local files

Test flow:
1. Write a table and a configuration to tmp_path
2. Run the pipeline (library call and CLI entry point)
3. Check aggregates, model and saved outputs
"""

import json

import pandas as pd
import pytest

from config.pipeline_config import PipelineConfig
from data_engineering.utils.errors import SchemaMismatch
from ml_engineering.utils.persistence import load_model_summary
from scripts.run_pipeline import main, run_pipeline


@pytest.fixture
def covid_config(tmp_path, wide_cases):
    wide_cases.to_csv(tmp_path / 'cases.csv', index=False)
    return {
        'name': 'covid_test',
        'source': 'cases.csv',
        'layout': 'wide',
        'id_columns': ['Province/State', 'Country/Region'],
        'value_column': 'cases',
        'cumulative': True,
        'category_source': 'Country/Region',
        'category_column': 'continent',
        'category_rules': [
            {'label': 'Europe', 'values': ['Italy']},
            {'label': 'North America', 'values': ['Canada']},
        ],
        'group_by_columns': ['continent', 'date'],
        'metric_columns': ['new_cases'],
        'model_type': 'linear',
        'outcome_column': 'new_cases',
        'output_dir': str(tmp_path / 'out'),
    }


@pytest.fixture
def shootings_config(tmp_path, incidents):
    incidents.to_csv(tmp_path / 'shootings.csv', index=False)
    return {
        'name': 'shootings_test',
        'source': 'shootings.csv',
        'layout': 'long',
        'date_column': 'OCCUR_DATE',
        'date_format': '%m/%d/%Y',
        'flag_rules': {
            'is_fatal': {'source': 'STATISTICAL_MURDER_FLAG', 'true_values': ['Y'], 'false_values': ['N']}
        },
        'group_by_columns': ['BORO', 'year'],
        'metric_columns': ['is_fatal'],
        'model_type': 'logistic',
        'predictor_columns': ['BORO', 'VIC_SEX'],
        'outcome_column': 'is_fatal',
        'output_dir': str(tmp_path / 'out'),
    }


def write_config(tmp_path, data):
    path = tmp_path / f'{data["name"]}.json'
    path.write_text(json.dumps(data))
    return path


def test_wide_time_series_run(tmp_path, covid_config):
    config = PipelineConfig.from_json(write_config(tmp_path, covid_config))

    result = run_pipeline(config, save=True, verbose=False)

    assert len(result.tidy) == 9
    totals = result.aggregates.groupby('continent')['new_cases'].sum().to_dict()
    assert totals == {'Europe': 5, 'North America': 4, 'Other': 1}

    assert result.model.model_type == 'linear'
    assert result.aggregates_path.exists()
    saved = pd.read_csv(result.aggregates_path)
    assert list(saved.columns) == ['continent', 'date', 'new_cases']

    summary = load_model_summary(result.model_path)
    assert summary['name'] == 'covid_test'
    assert set(summary['metrics']) == {'rmse', 'mae', 'r2'}


def test_incident_run(tmp_path, shootings_config):
    config = PipelineConfig.from_json(write_config(tmp_path, shootings_config))

    result = run_pipeline(config, save=False, verbose=False)

    fatal = {
        (row.BORO, row.year): row.is_fatal
        for row in result.aggregates.itertuples(index=False)
    }
    assert fatal == {
        ('BRONX', 2020): 2, ('BRONX', 2021): 0,
        ('BROOKLYN', 2020): 1, ('BROOKLYN', 2021): 1,
    }

    # The row with an unknown flag is excluded from the fit
    assert result.model.n_obs == 10
    assert result.model.predictor_names == ('Intercept', 'BORO[T.BROOKLYN]', 'VIC_SEX[T.M]')
    assert result.aggregates_path is None
    assert result.model_path is None


def test_cli_success(tmp_path, shootings_config):
    path = write_config(tmp_path, shootings_config)

    assert main([str(path), '--no-save', '--quiet']) == 0
    assert not (tmp_path / 'out').exists()


def test_cli_output_dir_override(tmp_path, covid_config):
    path = write_config(tmp_path, covid_config)
    override = tmp_path / 'elsewhere'

    assert main([str(path), '--output-dir', str(override), '--quiet']) == 0
    assert (override / 'aggregates' / 'covid_test_aggregates.csv').exists()
    assert (override / 'models' / 'covid_test_linear.json').exists()


def test_cli_bad_date_aborts(tmp_path, shootings_config, incidents, capsys):
    incidents.loc[3, 'OCCUR_DATE'] = '2021-05-20'
    incidents.to_csv(tmp_path / 'shootings.csv', index=False)
    path = write_config(tmp_path, shootings_config)

    assert main([str(path), '--no-save', '--quiet']) == 1
    out = capsys.readouterr().out
    assert 'DateParseError' in out
    assert 'row 3' in out


def test_cli_missing_source_aborts(tmp_path, shootings_config, capsys):
    shootings_config['source'] = 'nowhere.csv'
    path = write_config(tmp_path, shootings_config)

    assert main([str(path), '--quiet']) == 1
    assert 'SourceUnavailable' in capsys.readouterr().out


def test_non_binary_outcome_is_rejected_before_fitting(tmp_path, shootings_config):
    shootings_config['predictor_columns'] = ['BORO']
    shootings_config['outcome_column'] = 'VIC_SEX'
    config = PipelineConfig.from_json(write_config(tmp_path, shootings_config))

    with pytest.raises(SchemaMismatch) as excinfo:
        run_pipeline(config, save=False, verbose=False)

    assert 'VIC_SEX' in str(excinfo.value)
