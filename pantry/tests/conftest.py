import pytest

from pantry.auth import get_current_user
from pantry.main import app
from pantry.models import User


@pytest.fixture(autouse=True)
def override_auth(request):
    if request.node.get_closest_marker("real_auth"):
        yield
        return

    app.dependency_overrides[get_current_user] = lambda: User(
        id=1,
        name="Test Household",
        email="household@pantry.local",
        password_hash="x",
        is_active=True,
    )
    yield
    app.dependency_overrides.pop(get_current_user, None)
