"""
Unit tests for run configuration and logging setup
"""

import logging

import pytest

from mrsim.config import DEFAULT_LOG_LEVEL, DEFAULT_WORK_DIR, JobConfig, configure_logging

ENV_VARS = ['MRSIM_WORK_DIR', 'MRSIM_NUM_WORKERS', 'MRSIM_PARTITIONS',
            'MRSIM_WORDS_PER_PARTITION', 'MRSIM_WAIT_TIMEOUT', 'MRSIM_LOG_LEVEL']


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestJobConfig:
    """Tests for JobConfig.from_env"""

    def test_defaults(self, clean_env):
        config = JobConfig.from_env()

        assert config.work_dir == './mr-work'
        assert config.num_workers is None
        assert config.partition_count is None
        assert config.words_per_partition == 2
        assert config.wait_timeout is None
        assert config.log_level == 'INFO'

    def test_reads_environment(self, clean_env):
        clean_env.setenv('MRSIM_WORK_DIR', '/tmp/mr')
        clean_env.setenv('MRSIM_NUM_WORKERS', '8')
        clean_env.setenv('MRSIM_PARTITIONS', '3')
        clean_env.setenv('MRSIM_WORDS_PER_PARTITION', '100')
        clean_env.setenv('MRSIM_WAIT_TIMEOUT', '1.5')
        clean_env.setenv('MRSIM_LOG_LEVEL', 'DEBUG')

        config = JobConfig.from_env()

        assert config.work_dir == '/tmp/mr'
        assert config.num_workers == 8
        assert config.partition_count == 3
        assert config.words_per_partition == 100
        assert config.wait_timeout == 1.5
        assert config.log_level == 'DEBUG'

    def test_blank_values_ignored(self, clean_env):
        clean_env.setenv('MRSIM_NUM_WORKERS', '  ')

        assert JobConfig.from_env().num_workers is None

    @pytest.mark.parametrize("name,value", [
        ('MRSIM_NUM_WORKERS', 'many'),
        ('MRSIM_PARTITIONS', '2.5'),
        ('MRSIM_WAIT_TIMEOUT', 'soon'),
    ])
    def test_invalid_values_rejected(self, clean_env, name, value):
        clean_env.setenv(name, value)

        with pytest.raises(ValueError, match=name):
            JobConfig.from_env()

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_words_per_partition_must_be_positive(self, clean_env, value):
        clean_env.setenv('MRSIM_WORDS_PER_PARTITION', value)

        with pytest.raises(ValueError, match="MRSIM_WORDS_PER_PARTITION"):
            JobConfig.from_env()

    def test_plain_config_ignores_environment(self, clean_env):
        """Only from_env reads MRSIM_* variables"""
        clean_env.setenv('MRSIM_WORK_DIR', '/tmp/elsewhere')
        clean_env.setenv('MRSIM_LOG_LEVEL', 'ERROR')

        config = JobConfig()

        assert config.work_dir == DEFAULT_WORK_DIR
        assert config.log_level == DEFAULT_LOG_LEVEL
        assert JobConfig.from_env().work_dir == '/tmp/elsewhere'


class TestConfigureLogging:
    """Tests for configure_logging"""

    def test_sets_root_level(self):
        configure_logging('debug')

        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging('CHATTY')
