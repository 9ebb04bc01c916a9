import pytest

from forge import db, edges, nodes
from forge.errors import NotFoundError, ValidationError
from forge.models import Campaign, Edge, Node, get_or_create_tags


def test_create_node_slugs_name(campaign):
    node = nodes.create_node(campaign, 'character', {
        'name': '  Theron the Bold! ',
        'subtype': 'npc',
        'summary': 'A retired sellsword.',
        'content': {'personality': 'Gruff', 'stats': {'str': 16}},
    })

    assert node.name == 'Theron the Bold!'
    assert node.slug == 'theron-the-bold'
    assert node.confidence == 'canon'
    assert node.is_secret is False
    assert node.content['stats'] == {'str': 16}
    assert len(node.id) == 36


def test_slug_collisions_get_a_suffix(make_node):
    first = make_node('character', 'Mara')
    second = make_node('character', 'Mara')
    third = make_node('place', 'mara')

    assert [first.slug, second.slug, third.slug] == ['mara', 'mara-1', 'mara-2']


def test_deleted_nodes_keep_their_slug(make_node):
    old = make_node('item', 'Sunblade')
    nodes.delete_node(old)
    new = make_node('item', 'Sunblade')
    assert new.slug == 'sunblade-1'


def test_validation_collects_field_errors(campaign):
    with pytest.raises(ValidationError) as exc:
        nodes.create_node(campaign, 'character', {
            'subtype': 'dungeon',
            'summary': 'x' * 501,
            'content': {'appearance': 42},
            'confidence': 'gospel',
        })
    errors = exc.value.errors
    assert set(errors) == {'name', 'subtype', 'summary', 'content.appearance', 'confidence'}
    assert errors['name'] == 'The name field is required.'
    assert Node.query.count() == 0


def test_name_needs_a_letter_or_number(campaign):
    with pytest.raises(ValidationError) as exc:
        nodes.create_node(campaign, 'plot', {'name': '!!!', 'subtype': 'mystery'})
    assert 'name' in exc.value.errors


def test_unknown_type_is_rejected(campaign):
    with pytest.raises(ValidationError):
        nodes.create_node(campaign, 'monster', {'name': 'Owlbear'})


def test_place_parent_writes_metadata_and_edge(make_node):
    realm = make_node('place', 'Sword Coast', subtype='region')
    town = make_node('place', 'Phandalin', subtype='town', parent_id=realm.id)

    assert town.meta['parent_id'] == realm.id
    edge = Edge.query.filter_by(source_node_id=town.id, type='located_in').one()
    assert edge.target_node_id == realm.id
    assert edge.label == 'Located in'


def test_parent_must_be_a_live_place(make_node, campaign):
    npc = make_node('character', 'Sildar')
    with pytest.raises(ValidationError) as exc:
        make_node('place', 'Tresendar Manor', subtype='building', parent_id=npc.id)
    assert 'parent_id' in exc.value.errors

    with pytest.raises(ValidationError):
        make_node('place', 'Nowhere', parent_id='not-a-uuid')


def test_parent_must_be_a_container_place(make_node):
    inn = make_node('place', 'Stonehill Inn', subtype='building')
    with pytest.raises(ValidationError) as exc:
        make_node('place', 'Cellar', subtype='building', parent_id=inn.id)
    assert 'parent_id' in exc.value.errors

    # Headquarters can be any place
    guild = make_node('faction', 'Innkeepers', headquarters_id=inn.id)
    assert guild.meta['headquarters_id'] == inn.id


def test_place_cannot_be_its_own_parent(make_node):
    town = make_node('place', 'Phandalin', subtype='town')
    with pytest.raises(ValidationError) as exc:
        nodes.update_node(town, {'name': 'Phandalin', 'subtype': 'town', 'parent_id': town.id})
    assert 'parent_id' in exc.value.errors


def test_update_replaces_parent_edge(make_node):
    north = make_node('place', 'North', subtype='region')
    south = make_node('place', 'South', subtype='region')
    town = make_node('place', 'Waypoint', subtype='town', parent_id=north.id)

    nodes.update_node(town, {'name': 'Waypoint', 'subtype': 'town', 'parent_id': south.id})
    located = Edge.query.filter_by(source_node_id=town.id, type='located_in').all()
    assert [e.target_node_id for e in located] == [south.id]
    assert town.meta['parent_id'] == south.id

    # Saving again with the same parent keeps the one edge
    nodes.update_node(town, {'name': 'Waypoint', 'subtype': 'town', 'parent_id': south.id})
    assert Edge.query.filter_by(source_node_id=town.id, type='located_in').count() == 1

    nodes.update_node(town, {'name': 'Waypoint', 'subtype': 'town'})
    assert Edge.query.filter_by(source_node_id=town.id, type='located_in').count() == 0
    assert 'parent_id' not in town.meta


def test_update_keeps_unrelated_edges(campaign, make_node):
    a = make_node('character', 'Aldric')
    b = make_node('character', 'Brenna')
    edges.create_edge(campaign, a.id, b.id, 'knows')

    nodes.update_node(a, {'name': 'Aldric', 'subtype': 'villain'})
    assert a.subtype == 'villain'
    assert Edge.query.filter_by(source_node_id=a.id).count() == 1


def test_update_with_new_name_moves_slug(make_node):
    make_node('character', 'Gundren')
    node = make_node('character', 'Nundro')
    nodes.update_node(node, {'name': 'Gundren', 'subtype': 'npc'})
    assert node.slug == 'gundren-1'


def test_faction_headquarters(make_node):
    keep = make_node('place', 'Cragmaw Castle', subtype='building')
    faction = make_node('faction', 'Cragmaw Tribe', subtype='military', headquarters_id=keep.id)

    assert faction.meta['headquarters_id'] == keep.id
    edge = Edge.query.filter_by(source_node_id=faction.id).one()
    assert (edge.type, edge.target_node_id) == ('headquartered_in', keep.id)


def test_rename_node(make_node):
    make_node('item', 'Lightbringer')
    mace = make_node('item', 'Mace')

    nodes.rename_node(mace, 'Lightbringer')
    assert mace.name == 'Lightbringer'
    assert mace.slug == 'lightbringer-1'

    nodes.rename_node(mace, 'Lightbringer')
    assert mace.slug == 'lightbringer-1'

    with pytest.raises(ValidationError):
        nodes.rename_node(mace, '   ')


def test_list_nodes_filters(campaign, make_node):
    make_node('character', 'Zara', subtype='villain')
    ann = make_node('character', 'Ann', subtype='ally')
    make_node('character', 'Bob', subtype='pc')
    make_node('place', 'Not a character')
    gone = make_node('character', 'Gone')
    nodes.delete_node(gone)

    names = [n.name for n in nodes.list_nodes(campaign, 'character')]
    assert names == ['Ann', 'Bob', 'Zara']

    names = [n.name for n in nodes.list_nodes(campaign, 'character', subtypes=['villain', 'ally'])]
    assert names == ['Ann', 'Zara']

    ann.tags = get_or_create_tags(campaign.id, 'Friendly')
    db.session.commit()
    assert [n.name for n in nodes.list_nodes(campaign, 'character', tag='friendly')] == ['Ann']


def test_parent_place_options(campaign, make_node):
    world = make_node('place', 'Toril', subtype='world')
    make_node('place', 'Neverwinter', subtype='city')
    make_node('place', 'Wave Echo Cave', subtype='dungeon')

    names = [p.name for p in nodes.parent_place_options(campaign)]
    assert names == ['Neverwinter', 'Toril']

    names = [p.name for p in nodes.parent_place_options(campaign, exclude_id=world.id)]
    assert names == ['Neverwinter']


def test_delete_node_removes_edges_and_tags(campaign, make_node):
    hub = make_node('character', 'Hub')
    a = make_node('character', 'Spoke A')
    b = make_node('place', 'Spoke B')
    edges.create_edge(campaign, hub.id, a.id, 'knows', bidirectional=True)
    edges.create_edge(campaign, hub.id, b.id, 'lives_in')
    edges.create_edge(campaign, a.id, b.id, 'visited')
    hub.tags = get_or_create_tags(campaign.id, 'important')
    db.session.commit()

    nodes.delete_node(hub)

    assert hub.deleted_at is not None
    assert hub.tags == []
    remaining = Edge.query.filter_by(campaign_id=campaign.id).all()
    assert [(e.source_node_id, e.type) for e in remaining] == [(a.id, 'visited')]
    assert Node.live().filter_by(id=hub.id).first() is None


def test_delete_parent_clears_child_metadata(make_node):
    region = make_node('place', 'Region', subtype='region')
    town = make_node('place', 'Town', subtype='town', parent_id=region.id)

    nodes.delete_node(region)

    assert 'parent_id' not in town.meta
    assert Edge.query.filter_by(source_node_id=town.id).count() == 0


def test_trash_restore_and_purge(campaign, make_node):
    node = make_node('plot', 'The Black Spider')
    nodes.delete_node(node)
    assert [n.id for n in nodes.list_deleted(campaign)] == [node.id]

    with pytest.raises(NotFoundError):
        nodes.get_node(campaign, 'plot', 'the-black-spider')

    nodes.restore_node(nodes.get_deleted(campaign, node.id))
    assert nodes.get_node(campaign, 'plot', 'the-black-spider').id == node.id
    assert nodes.list_deleted(campaign) == []

    with pytest.raises(NotFoundError):
        nodes.get_deleted(campaign, node.id)

    nodes.delete_node(node)
    node_id = node.id
    nodes.purge_node(nodes.get_deleted(campaign, node_id))
    assert db.session.get(Node, node_id) is None


def test_describe_place(campaign, make_node):
    region = make_node('place', 'Region', subtype='region')
    city = make_node('place', 'City', subtype='city', parent_id=region.id)
    make_node('place', 'Tavern', subtype='building', parent_id=city.id)
    mayor = make_node('character', 'Mayor')
    edges.create_edge(campaign, mayor.id, city.id, 'located_in')

    view = nodes.describe_node(city)

    assert view['node']['slug'] == 'city'
    assert view['parent']['id'] == region.id
    assert [p['name'] for p in view['child_places']] == ['Tavern']
    assert [c['name'] for c in view['characters']] == ['Mayor']


def test_describe_faction(campaign, make_node):
    hall = make_node('place', 'Guild Hall', subtype='building')
    guild = make_node('faction', 'Miners Guild', headquarters_id=hall.id)
    allies = make_node('faction', 'Lords Alliance', subtype='government')
    friends = make_node('faction', 'Harpers', subtype='arcane')
    rivals = make_node('faction', 'Zhentarim', subtype='criminal')
    member = make_node('character', 'Digger')
    edges.create_edge(campaign, member.id, guild.id, 'member_of')
    edges.create_edge(campaign, guild.id, allies.id, 'allied_with', bidirectional=True)
    edges.create_edge(campaign, friends.id, guild.id, 'allied_with')
    edges.create_edge(campaign, rivals.id, guild.id, 'rivals_with')

    view = nodes.describe_node(guild)

    assert view['headquarters']['name'] == 'Guild Hall'
    assert [m['name'] for m in view['members']] == ['Digger']
    assert [a['name'] for a in view['allies']] == ['Harpers', 'Lords Alliance']
    assert [r['name'] for r in view['rivals']] == ['Zhentarim']


# ── HTTP ───────────────────────────────────────────────────────────────

def test_collection_routes(auth_client, campaign):
    response = auth_client.post('/campaigns/lost-mines/characters', json={
        'name': 'Sildar Hallwinter', 'subtype': 'ally', 'confidence': 'likely',
    })
    assert response.status_code == 201
    node = response.get_json()['node']
    assert node['slug'] == 'sildar-hallwinter'
    assert node['type'] == 'character'

    listing = auth_client.get('/campaigns/lost-mines/characters').get_json()
    assert [n['name'] for n in listing['characters']] == ['Sildar Hallwinter']
    assert 'pc' in listing['subtypes']

    shown = auth_client.get('/campaigns/lost-mines/characters/sildar-hallwinter').get_json()
    assert shown['node']['confidence'] == 'likely'
    assert shown['relationships']['outgoing'] == []

    # Same slug, wrong collection
    assert auth_client.get('/campaigns/lost-mines/places/sildar-hallwinter').status_code == 404

    response = auth_client.put('/campaigns/lost-mines/characters/sildar-hallwinter',
                               json={'name': 'Sildar', 'subtype': 'ally'})
    assert response.get_json()['node']['slug'] == 'sildar'

    response = auth_client.delete('/campaigns/lost-mines/characters/sildar')
    assert response.status_code == 200
    trash = auth_client.get('/campaigns/lost-mines/trash').get_json()
    assert [n['name'] for n in trash['nodes']] == ['Sildar']


def test_create_route_reports_validation_errors(auth_client, campaign):
    response = auth_client.post('/campaigns/lost-mines/places', json={'subtype': 'volcano'})
    assert response.status_code == 422
    body = response.get_json()
    assert set(body['errors']) == {'name', 'subtype'}


def test_trash_routes(auth_client, campaign, make_node):
    node = make_node('item', 'Spider Staff')
    nodes.delete_node(node)

    response = auth_client.post(f'/campaigns/lost-mines/trash/{node.id}/restore')
    assert response.status_code == 200
    assert auth_client.get('/campaigns/lost-mines/items/spider-staff').status_code == 200

    assert auth_client.delete(f'/campaigns/lost-mines/trash/{node.id}').status_code == 404


def test_parent_picker_route(auth_client, campaign, make_node):
    make_node('place', 'Realm', subtype='world')
    make_node('place', 'Cave', subtype='dungeon')
    body = auth_client.get('/campaigns/lost-mines/places/parents').get_json()
    assert [p['name'] for p in body['places']] == ['Realm']


def test_other_users_campaign_is_not_found(db, auth_client, other_user):
    theirs = Campaign(user_id=other_user.id, name='Private', slug='private')
    db.session.add(theirs)
    db.session.commit()

    response = auth_client.get('/campaigns/private/characters')
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Campaign not found.'
