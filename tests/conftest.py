"""
Pytest configuration and shared fixtures
"""

import logging
import os
import shutil
import tempfile

import pytest

EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'examples')


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def work_dir(temp_dir):
    """Work directory for artifacts, separate from inputs"""
    return os.path.join(temp_dir, 'work')


@pytest.fixture
def sample_text():
    """Sample text for testing"""
    return """The quick brown fox jumps over the lazy dog.
The dog was really lazy.
The fox was very quick and brown.
Quick brown foxes are amazing animals.
Lazy dogs sleep all day."""


@pytest.fixture
def write_input(temp_dir):
    """Factory writing an input file into the temp directory"""
    def _write(name, content):
        path = os.path.join(temp_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path
    return _write


@pytest.fixture
def sample_input_files(write_input, sample_text):
    """Split the sample text into one input file per line"""
    return [write_input(f'input-{i}.txt', line) for i, line in enumerate(sample_text.splitlines())]


@pytest.fixture
def wordcount_job_file():
    """Path to word count example job file"""
    return os.path.join(EXAMPLES_DIR, 'wordcount.py')


@pytest.fixture
def inverted_index_job_file():
    """Path to inverted index example job file"""
    return os.path.join(EXAMPLES_DIR, 'inverted_index.py')


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo logging configuration done by CLI entry points"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
