import pytest
from flask_jwt_extended import create_access_token

from botilyx import create_app
from botilyx.extensions import db
from botilyx.models import FamilyGroup, Medication, NotificationPreferences, User

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    "EMAIL_ENABLED": False,
    "FRONTEND_URL": "http://localhost:3000",
    "NOTIFICATION_PROCESSOR_SECRET": "processor-secret",
    "VAPID_PUBLIC_KEY": "test-public-key",
    "VAPID_PRIVATE_KEY": "test-private-key",
    "GOOGLE_API_KEY": None,
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email="ana@example.com", first_name="Ana", last_name="Perez", password="secret123", group=None):
    user = User(first_name=first_name, last_name=last_name, email=email, is_verified=True)
    user.set_password(password)
    if group is None:
        user.family_group = FamilyGroup(name=f"{last_name} family")
        user.is_group_admin = True
    else:
        user.family_group = group
    db.session.add(user)
    db.session.commit()
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}


def set_preferences(user, **flags):
    prefs = NotificationPreferences.get_or_create(user.id)
    for channel, enabled in flags.items():
        setattr(prefs, channel, enabled)
    db.session.commit()
    return prefs


def make_medication(user, name="Ibuprofen 600mg", quantity=20, **extra):
    med = Medication(
        user_id=user.id,
        commercial_name=name,
        initial_quantity=quantity,
        current_quantity=quantity,
        unit="tablets",
        **extra,
    )
    db.session.add(med)
    db.session.commit()
    return med


@pytest.fixture
def user(app):
    return make_user()


@pytest.fixture
def headers(user):
    return auth_headers(user)


@pytest.fixture
def medication(user):
    return make_medication(user)
