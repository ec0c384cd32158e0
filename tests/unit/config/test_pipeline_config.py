import json
from pathlib import Path

import pytest

from config.paths import EXAMPLE_CONFIGS, GOLD
from config.pipeline_config import PipelineConfig
from data_engineering.utils.errors import ConfigError


def write_config(tmp_path, data, name='run.json'):
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return path


def test_defaults():
    config = PipelineConfig(source='cases.csv', id_columns=['Country/Region'])

    assert config.layout == 'wide'
    assert config.date_format == '%m/%d/%y'
    assert config.max_iter == 100
    assert config.tol == 1e-8
    assert config.allow_separation is False
    assert config.output_dir == GOLD


def test_output_dir_is_a_path():
    config = PipelineConfig(source='a.csv', layout='long', output_dir='/tmp/out')
    assert config.output_dir == Path('/tmp/out')


@pytest.mark.parametrize('kwargs', [
    {'source': ''},
    {'source': 'a.csv', 'layout': 'diagonal'},
    {'source': 'a.csv', 'layout': 'wide'},
    {'source': 'a.csv', 'layout': 'long', 'model_type': 'poisson'},
    {'source': 'a.csv', 'layout': 'long', 'model_type': 'logistic', 'outcome_column': 'is_fatal'},
    {'source': 'a.csv', 'layout': 'long', 'model_type': 'linear'},
    {'source': 'a.csv', 'layout': 'long', 'category_rules': [{'label': 'Europe'}]},
    {'source': 'a.csv', 'layout': 'long', 'flag_rules': {'is_fatal': {'source': 'FLAG'}}},
])
def test_invalid_configurations(kwargs):
    with pytest.raises(ConfigError):
        PipelineConfig(**kwargs)


def test_from_dict_rejects_unknown_fields():
    with pytest.raises(ConfigError, match='colour'):
        PipelineConfig.from_dict({'source': 'a.csv', 'layout': 'long', 'colour': 'red'})


def test_from_dict_requires_source():
    with pytest.raises(ConfigError):
        PipelineConfig.from_dict({'layout': 'long'})


def test_from_json_resolves_relative_source(tmp_path):
    path = write_config(tmp_path, {'source': 'data/cases.csv', 'layout': 'long'})

    config = PipelineConfig.from_json(path)

    assert config.source == str(tmp_path / 'data' / 'cases.csv')


def test_from_json_keeps_urls(tmp_path):
    url = 'https://example.org/cases.csv'
    config = PipelineConfig.from_json(write_config(tmp_path, {'source': url, 'layout': 'long'}))
    assert config.source == url


def test_from_json_unreadable(tmp_path):
    with pytest.raises(ConfigError):
        PipelineConfig.from_json(tmp_path / 'missing.json')

    bad = tmp_path / 'bad.json'
    bad.write_text('{not json')
    with pytest.raises(ConfigError):
        PipelineConfig.from_json(bad)

    with pytest.raises(ConfigError):
        PipelineConfig.from_json(write_config(tmp_path, ['a.csv'], name='list.json'))


@pytest.mark.parametrize('name', ['covid_global_cases.json', 'nypd_shootings.json'])
def test_example_configurations_load(name):
    config = PipelineConfig.from_json(EXAMPLE_CONFIGS / name)
    assert config.model_type in ('linear', 'logistic')
