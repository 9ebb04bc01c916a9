"""Node CRUD for the five collections, plus the trash.

All five entity kinds share these handlers; the URL segment
(characters, places, ...) picks the node type.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from forge import nodes as store
from forge import validation as v
from forge.models import Campaign
from forge.taxonomy import COLLECTIONS, NODE_SUBTYPES, CONFIDENCE_LEVELS, CONTENT_FIELDS

nodes_bp = Blueprint('nodes', __name__, url_prefix='/campaigns/<slug>')

COLLECTION = f"<any({', '.join(COLLECTIONS)}):collection>"


@nodes_bp.route(f'/{COLLECTION}', methods=['GET'])
@login_required
def list_nodes(slug, collection):
    campaign = Campaign.get_owned(slug, current_user.id)
    node_type = COLLECTIONS[collection]

    # ?subtype=npc,villain or ?subtype=npc&subtype=villain
    subtypes = []
    for value in request.args.getlist('subtype'):
        subtypes.extend(s.strip() for s in value.split(',') if s.strip())

    nodes = store.list_nodes(campaign, node_type, subtypes=subtypes or None,
                             tag=request.args.get('tag'))
    return jsonify({
        collection: [n.to_dict() for n in nodes],
        'subtypes': NODE_SUBTYPES[node_type],
        'confidence_levels': CONFIDENCE_LEVELS,
        'content_fields': CONTENT_FIELDS[node_type],
    })


@nodes_bp.route(f'/{COLLECTION}', methods=['POST'])
@login_required
def create_node(slug, collection):
    campaign = Campaign.get_owned(slug, current_user.id)
    node_type = COLLECTIONS[collection]
    node = store.create_node(campaign, node_type, v.json_body())
    return jsonify({
        'node': node.to_dict(),
        'message': f'{node_type.capitalize()} created successfully!',
    }), 201


@nodes_bp.route('/places/parents')
@login_required
def parent_places(slug):
    """Candidate parents for the place form (worlds, continents, regions, cities, towns)."""
    campaign = Campaign.get_owned(slug, current_user.id)
    places = store.parent_place_options(campaign, exclude_id=request.args.get('exclude'))
    return jsonify({'places': [p.to_brief() for p in places]})


@nodes_bp.route(f'/{COLLECTION}/<node_slug>', methods=['GET'])
@login_required
def show_node(slug, collection, node_slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_node(campaign, COLLECTIONS[collection], node_slug)
    return jsonify(store.describe_node(node))


@nodes_bp.route(f'/{COLLECTION}/<node_slug>', methods=['PUT'])
@login_required
def update_node(slug, collection, node_slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_node(campaign, COLLECTIONS[collection], node_slug)
    node = store.update_node(node, v.json_body())
    return jsonify({
        'node': node.to_dict(),
        'message': f'{node.type.capitalize()} updated successfully!',
    })


@nodes_bp.route(f'/{COLLECTION}/<node_slug>/rename', methods=['POST'])
@login_required
def rename_node(slug, collection, node_slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_node(campaign, COLLECTIONS[collection], node_slug)
    node = store.rename_node(node, v.json_body().get('name'))
    return jsonify({'node': node.to_dict(), 'message': 'Renamed successfully.'})


@nodes_bp.route(f'/{COLLECTION}/<node_slug>', methods=['DELETE'])
@login_required
def delete_node(slug, collection, node_slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_node(campaign, COLLECTIONS[collection], node_slug)
    store.delete_node(node)
    return jsonify({'message': f'{node.type.capitalize()} moved to trash.'})


# ── Trash ──────────────────────────────────────────────────────────────

@nodes_bp.route('/trash')
@login_required
def list_trash(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    return jsonify({'nodes': [n.to_dict() for n in store.list_deleted(campaign)]})


@nodes_bp.route('/trash/<node_id>/restore', methods=['POST'])
@login_required
def restore_node(slug, node_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.restore_node(store.get_deleted(campaign, node_id))
    return jsonify({'node': node.to_dict(), 'message': f'"{node.name}" restored.'})


@nodes_bp.route('/trash/<node_id>', methods=['DELETE'])
@login_required
def purge_node(slug, node_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_deleted(campaign, node_id)
    name = node.name
    store.purge_node(node)
    return jsonify({'message': f'"{name}" permanently deleted.'})
