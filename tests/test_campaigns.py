from forge import db, edges, nodes
from forge.models import Campaign, Edge, GameSession, Node


def test_requires_login(client, campaign):
    response = client.get('/campaigns')
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Authentication required.'}


def test_signup_login_logout(client):
    response = client.post('/signup', json={'username': 'newgm', 'password': 'long-enough'})
    assert response.status_code == 201
    assert client.get('/me').get_json()['user']['username'] == 'newgm'

    assert client.post('/logout').status_code == 200

    response = client.post('/login', json={'username': 'newgm', 'password': 'wrong-password'})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid username or password.'


def test_signup_validation(client, user):
    response = client.post('/signup', json={'username': 'gamemaster', 'password': 'short'})
    assert response.status_code == 422
    assert set(response.get_json()['errors']) == {'username', 'password'}


def test_create_campaign_with_unique_slug(auth_client, campaign):
    response = auth_client.post('/campaigns', json={'name': 'Lost Mines', 'player_count': 4})
    assert response.status_code == 201
    created = response.get_json()['campaign']
    assert created['slug'] == 'lost-mines-1'
    assert created['status'] == 'setup'
    assert created['rule_system'] == '5e'


def test_create_campaign_validation(auth_client):
    response = auth_client.post('/campaigns', json={'player_count': 21})
    assert response.status_code == 422
    assert set(response.get_json()['errors']) == {'name', 'player_count'}


def test_list_campaigns_only_shows_own(db, auth_client, campaign, other_user):
    db.session.add(Campaign(user_id=other_user.id, name='Theirs', slug='theirs'))
    db.session.commit()

    body = auth_client.get('/campaigns').get_json()
    assert [c['slug'] for c in body['campaigns']] == ['lost-mines']
    assert 'dark_fantasy' in body['genres']
    assert '5e' in body['rule_systems']


def test_show_campaign_dashboard(auth_client, campaign, make_node):
    make_node('character', 'Gundren')
    make_node('character', 'Sildar')
    make_node('place', 'Phandalin')
    gone = make_node('plot', 'Abandoned Plot')
    nodes.delete_node(gone)
    db.session.add(GameSession(campaign_id=campaign.id, number=1))
    db.session.commit()

    body = auth_client.get('/campaigns/lost-mines').get_json()
    assert body['stats'] == {'characters': 2, 'places': 1, 'plots': 0, 'sessions': 1}
    assert len(body['recent_nodes']) == 3
    assert [s['number'] for s in body['sessions']] == [1]


def test_update_campaign(auth_client, campaign):
    response = auth_client.put('/campaigns/lost-mines', json={
        'name': 'Lost Mine of Phandelver',
        'status': 'paused',
        'tone_settings': {'grim': 2},
    })
    assert response.status_code == 200
    updated = response.get_json()['campaign']
    assert updated['name'] == 'Lost Mine of Phandelver'
    assert updated['slug'] == 'lost-mines'
    assert updated['status'] == 'paused'
    assert updated['tone_settings'] == {'grim': 2}

    response = auth_client.put('/campaigns/lost-mines', json={'name': 'X', 'status': 'archived'})
    assert response.status_code == 422


def test_delete_campaign_cascades(auth_client, campaign, make_node):
    a = make_node('character', 'A')
    b = make_node('character', 'B')
    edges.create_edge(campaign, a.id, b.id, 'knows', bidirectional=True)
    db.session.add(GameSession(campaign_id=campaign.id, number=0))
    db.session.commit()

    response = auth_client.delete('/campaigns/lost-mines')
    assert response.status_code == 200
    assert Campaign.query.count() == 0
    assert Node.query.count() == 0
    assert Edge.query.count() == 0
    assert GameSession.query.count() == 0


def test_json_errors_for_unknown_routes(auth_client):
    response = auth_client.get('/nowhere')
    assert response.status_code == 404
    assert 'error' in response.get_json()

    response = auth_client.patch('/campaigns')
    assert response.status_code == 405


def test_non_object_body_is_rejected(auth_client):
    response = auth_client.post('/campaigns', json=['not', 'an', 'object'])
    assert response.status_code == 422
    assert 'body' in response.get_json()['errors']


def test_csrf_token_route(client):
    body = client.get('/csrf-token').get_json()
    assert body['csrf_token']
