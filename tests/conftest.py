import pytest

from config import Config
from forge import create_app, db as _db
from forge import nodes
from forge.models import User, Campaign


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'WARNING'


@pytest.fixture
def app():
    app = create_app(ConfigForTests)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def user(db):
    user = User(username='gamemaster', email='gm@example.com')
    user.set_password('correct-horse')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(db):
    user = User(username='someoneelse')
    user.set_password('battery-staple')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client, user):
    response = client.post('/login', json={'username': 'gamemaster', 'password': 'correct-horse'})
    assert response.status_code == 200
    return client


@pytest.fixture
def campaign(db, user):
    campaign = Campaign(user_id=user.id, name='Lost Mines', slug='lost-mines')
    db.session.add(campaign)
    db.session.commit()
    return campaign


@pytest.fixture
def make_node(campaign):
    """Factory: make_node('character', 'Theron', subtype='npc', ...)."""
    defaults = {
        'character': 'npc',
        'place': 'city',
        'item': 'artifact',
        'faction': 'guild',
        'plot': 'main_quest',
    }

    def _make(node_type, name, **fields):
        data = {'name': name, 'subtype': defaults[node_type]}
        data.update(fields)
        return nodes.create_node(campaign, node_type, data)

    return _make
