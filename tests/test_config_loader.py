"""Tests for configuration loading, validation and CLI merging."""

import argparse
from pathlib import Path

import pytest
import yaml

from dingtalk_doc_migrator.config_loader import ConfigLoader, document_data_url, get_nested


def write_config(tmp_path: Path, data) -> str:
    path = tmp_path / 'config.yaml'
    path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data, encoding='utf-8')
    return str(path)


class TestLoad:
    """Test YAML loading and environment substitution."""

    def test_defaults_filled_in(self, tmp_path):
        config = ConfigLoader.load(write_config(tmp_path, {'export': {'output_directory': '/tmp/out'}}))

        assert config['export']['output_directory'] == '/tmp/out'
        assert config['dingtalk']['base_url'] == 'https://alidocs.dingtalk.com'
        assert config['renderer']['max_depth'] == 64

    def test_empty_file_gives_defaults(self, tmp_path):
        assert ConfigLoader.load(write_config(tmp_path, '')) == ConfigLoader.defaults()

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv('TEST_DT_COOKIE', 'sid=42')
        monkeypatch.delenv('TEST_DT_UNSET', raising=False)
        path = write_config(tmp_path, {'dingtalk': {'cookie': '${TEST_DT_COOKIE}', 'cookie_file': '${TEST_DT_UNSET}'}})

        config = ConfigLoader.load(path)

        assert config['dingtalk']['cookie'] == 'sid=42'
        assert config['dingtalk']['cookie_file'] == '${TEST_DT_UNSET}'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load(str(tmp_path / 'missing.yaml'))

    def test_non_mapping_file(self, tmp_path):
        with pytest.raises(ValueError):
            ConfigLoader.load(write_config(tmp_path, '- a\n- b\n'))

    def test_defaults_are_copies(self):
        ConfigLoader.defaults()['dingtalk']['base_url'] = 'changed'

        assert ConfigLoader.defaults()['dingtalk']['base_url'] == 'https://alidocs.dingtalk.com'


class TestValidate:
    """Test validation rules."""

    def test_defaults_are_valid(self):
        ConfigLoader.validate(ConfigLoader.defaults())

    @pytest.mark.parametrize('path,value', [
        ('dingtalk.base_url', 'ftp://x'),
        ('dingtalk.base_url', ''),
        ('dingtalk.base_url', '${UNSET_BASE}'),
        ('dingtalk.document_data_url', 'not-a-url'),
        ('dingtalk.timeout', 0),
        ('dingtalk.timeout', True),
        ('dingtalk.max_retries', -1),
        ('dingtalk.verify_ssl', 'yes'),
        ('export.output_directory', None),
        ('renderer.max_depth', 0),
    ])
    def test_invalid_values(self, path, value):
        config = ConfigLoader.defaults()
        section, key = path.split('.')
        config[section][key] = value

        with pytest.raises(ValueError):
            ConfigLoader.validate(config)

    def test_output_directory_must_be_a_directory(self, tmp_path):
        existing_file = tmp_path / 'file.txt'
        existing_file.write_text('x')
        config = ConfigLoader.defaults()
        config['export']['output_directory'] = str(existing_file)

        with pytest.raises(ValueError):
            ConfigLoader.validate(config)


class TestMergeWithArgs:
    """Test CLI precedence."""

    def test_cli_overrides(self):
        args = argparse.Namespace(
            base_url='https://docs.example.com', cookie='c=1', output_dir='/out',
            log_file='run.log', verbose=2
        )

        merged = ConfigLoader.merge_with_args(ConfigLoader.defaults(), args)

        assert merged['dingtalk']['base_url'] == 'https://docs.example.com'
        assert merged['dingtalk']['cookie'] == 'c=1'
        assert merged['export']['output_directory'] == '/out'
        assert merged['logging'] == {'level': 'DEBUG', 'file': 'run.log'}

    def test_unset_args_keep_config(self):
        config = ConfigLoader.defaults()
        args = argparse.Namespace(base_url=None, cookie=None, output_dir=None, log_file=None, verbose=1)

        merged = ConfigLoader.merge_with_args(config, args)

        assert merged['dingtalk'] == config['dingtalk']
        assert merged['logging']['level'] == 'INFO'
        assert config['logging']['level'] is None


class TestHelpers:
    """Test get_nested and document_data_url."""

    def test_get_nested(self):
        config = {'a': {'b': {'c': 1}}}

        assert get_nested(config, 'a.b.c') == 1
        assert get_nested(config, 'a.x.c', 'default') == 'default'
        assert get_nested(config, 'a.b.c.d') is None

    def test_document_data_url(self):
        assert document_data_url({}) == 'https://alidocs.dingtalk.com/api/document/data'
        assert document_data_url({}, 'https://x.test/') == 'https://x.test/api/document/data'
        assert document_data_url({'dingtalk': {'document_data_url': 'https://y.test/d'}}) == 'https://y.test/d'
