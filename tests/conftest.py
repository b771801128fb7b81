import pytest

from factories import build_family, build_participant


@pytest.fixture
def participants():
    return [
        build_participant(id="p1", name="Alice"),
        build_participant(id="p2", name="Bob"),
        build_participant(id="p3", name="Carol", family_id="f1"),
        build_participant(id="p4", name="Dave", family_id="f1"),
        build_participant(id="p5", name="Eve", family_id="f2"),
    ]


@pytest.fixture
def families():
    return [
        build_family(id="f1", family_name="Smith", adults=2, children=1),
        build_family(id="f2", family_name="Jones", adults=1, children=0),
    ]


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
