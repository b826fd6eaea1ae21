"""
Shared fixtures for the language data compiler tests.

Provides:
    - A raw data root covering every necessary module
    - A tool folder with placeholder executables
    - A canned tool runner
    - A loaded sample phone set
    - A builder wired to all of the above
"""

from __future__ import annotations

import io

import pytest

from langdata_compiler.builder import LanguageDataBuilder
from langdata_compiler.config import BuildConfig
from langdata_compiler.languages import Language
from langdata_compiler.monitoring.logging import LogLevel, StructuredLogger
from langdata_compiler.rawdata.loaders import load_phone_set
from langdata_compiler.testing import (
    StaticToolRunner,
    create_data_root,
    create_tool_dir,
    write_phone_set,
)


@pytest.fixture
def data_root(tmp_path):
    return create_data_root(tmp_path / "data")


@pytest.fixture
def tool_dir(tmp_path):
    return create_tool_dir(tmp_path / "tools")


@pytest.fixture
def runner():
    return StaticToolRunner()


@pytest.fixture
def phone_set(tmp_path):
    path = write_phone_set(tmp_path / "phoneset.xml")
    loaded, errors = load_phone_set(path, Language.EN_US)
    assert len(errors) == 0
    return loaded


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def quiet_logger(log_stream):
    return StructuredLogger(level=LogLevel.DEBUG, output=log_stream, json_format=True)


@pytest.fixture
def config(data_root, tool_dir, tmp_path):
    return BuildConfig(
        data_root=data_root,
        language=Language.EN_US,
        tool_dir=tool_dir,
        output_dir=tmp_path / "out",
    )


@pytest.fixture
def builder(config, runner, quiet_logger):
    return LanguageDataBuilder(config, runner=runner, logger=quiet_logger)
