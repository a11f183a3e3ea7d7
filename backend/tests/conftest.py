import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from platecost import main
from platecost.api.cost import get_estimator
from platecost.services.pricing.estimator import build_estimator


@pytest.fixture(name="estimator")
def estimator_fixture():
    estimator = build_estimator(providers=[])
    yield estimator
    estimator.reconciler.shutdown()


@pytest.fixture(name="client")
def client_fixture(estimator):
    main.app.dependency_overrides[get_estimator] = lambda: estimator
    client = TestClient(main.app)
    yield client
    main.app.dependency_overrides.clear()
