from datetime import date

import pytest
from fastapi.testclient import TestClient

import main
from database import LocalStore
from state import AppState
from textgen import TextGenerator

TODAY = date(2024, 10, 15)


@pytest.fixture
def store(tmp_path):
    return LocalStore(str(tmp_path / "data"))


@pytest.fixture
def state(store):
    return AppState(store)


@pytest.fixture
def generator():
    return TextGenerator(api_key=None)


@pytest.fixture
def client(state, generator):
    main.app.dependency_overrides[main.get_state] = lambda: state
    main.app.dependency_overrides[main.get_text_generator] = lambda: generator
    main.app.dependency_overrides[main.get_today] = lambda: TODAY
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()
