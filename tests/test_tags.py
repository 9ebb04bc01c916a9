from forge import db
from forge.models import Tag

BASE = '/campaigns/lost-mines'


def test_create_tag_lowercases_and_defaults_color(auth_client, campaign):
    response = auth_client.post(f'{BASE}/tags', json={'name': '  Undead '})
    assert response.status_code == 201
    assert response.get_json()['tag'] == {'id': 1, 'name': 'undead', 'color': '#6b7280'}


def test_tag_names_are_unique_per_campaign(auth_client, campaign):
    auth_client.post(f'{BASE}/tags', json={'name': 'boss'})
    response = auth_client.post(f'{BASE}/tags', json={'name': 'BOSS'})
    assert response.status_code == 422
    assert response.get_json()['errors'] == {'name': 'A tag named "boss" already exists.'}


def test_color_must_be_hex(auth_client, campaign):
    response = auth_client.post(f'{BASE}/tags', json={'name': 'loot', 'color': 'gold'})
    assert response.status_code == 422
    assert 'color' in response.get_json()['errors']


def test_set_node_tags_and_usage(auth_client, campaign, make_node):
    node = make_node('character', 'Klarg')
    make_node('character', 'Yeemik')

    response = auth_client.put(f'{BASE}/nodes/{node.id}/tags', json={'tags': 'Goblinoid, boss, boss, '})
    assert response.status_code == 200
    assert sorted(t['name'] for t in response.get_json()['node']['tags']) == ['boss', 'goblinoid']

    tags = auth_client.get(f'{BASE}/tags').get_json()['tags']
    assert [(t['name'], t['usage']) for t in tags] == [('boss', 1), ('goblinoid', 1)]

    response = auth_client.put(f'{BASE}/nodes/{node.id}/tags', json={'tags': ''})
    assert response.get_json()['node']['tags'] == []
    # Tags outlive the nodes they were on
    assert Tag.query.filter_by(campaign_id=campaign.id).count() == 2


def test_set_node_tags_needs_a_string(auth_client, campaign, make_node):
    node = make_node('item', 'Staff')
    response = auth_client.put(f'{BASE}/nodes/{node.id}/tags', json={'tags': ['a', 'b']})
    assert response.status_code == 422


def test_rename_and_recolor(auth_client, campaign):
    first = auth_client.post(f'{BASE}/tags', json={'name': 'npc'}).get_json()['tag']
    auth_client.post(f'{BASE}/tags', json={'name': 'villain'})

    response = auth_client.put(f'{BASE}/tags/{first["id"]}', json={'name': 'villain'})
    assert response.status_code == 422

    response = auth_client.put(f'{BASE}/tags/{first["id"]}', json={'name': 'Ally', 'color': '#22C55E'})
    assert response.get_json()['tag'] == {'id': first['id'], 'name': 'ally', 'color': '#22c55e'}


def test_delete_tag_unlinks_nodes(auth_client, campaign, make_node):
    node = make_node('place', 'Cragmaw Hideout', subtype='dungeon')
    auth_client.put(f'{BASE}/nodes/{node.id}/tags', json={'tags': 'lair'})
    tag_id = Tag.query.filter_by(name='lair').one().id

    response = auth_client.delete(f'{BASE}/tags/{tag_id}')
    assert response.status_code == 200
    assert db.session.get(Tag, tag_id) is None
    shown = auth_client.get(f'{BASE}/places/cragmaw-hideout').get_json()
    assert shown['node']['tags'] == []

    assert auth_client.delete(f'{BASE}/tags/{tag_id}').status_code == 404
