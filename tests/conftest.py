"""
Pytest configuration and shared fixtures
"""

import pytest

from tabquery.readers.cache import ResourceCache


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to only use asyncio backend."""
    return "asyncio"


@pytest.fixture
def scores_csv(tmp_path):
    """Small CSV with nulls in two columns"""
    csv_file = tmp_path / "scores.csv"
    csv_file.write_text("id,name,score\n1,Alice,9.5\n2,Bob,\n3,,7.0\n")
    return csv_file


@pytest.fixture
def people_csv(tmp_path):
    """CSV with every inferable column type"""
    csv_file = tmp_path / "people.csv"
    csv_file.write_text(
        "name,age,city,salary,active,joined\n"
        "Alice,30,NYC,75000.5,true,2021-03-01\n"
        "Bob,25,LA,65000,false,2020-11-15\n"
        "Charlie,35,SF,85000,true,2019-06-30\n"
        "Diana,28,NYC,70000,false,2022-01-10\n"
        "Eve,32,LA,,true,\n"
    )
    return csv_file


@pytest.fixture
def cache():
    """Fresh cache so tests never share fetched resources"""
    return ResourceCache()
