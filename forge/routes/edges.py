from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from forge import edges as store
from forge import relationship_types as catalog
from forge import validation as v
from forge.models import Campaign

edges_bp = Blueprint('edges', __name__, url_prefix='/campaigns/<slug>')


@edges_bp.route('/edges/types')
@login_required
def edge_types(slug):
    """The relationship catalog, grouped by category and flattened."""
    Campaign.get_owned(slug, current_user.id)
    return jsonify({'categories': catalog.CATEGORIES, 'types': catalog.all_types()})


@edges_bp.route('/nodes/<node_id>/edges')
@login_required
def node_edges(slug, node_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    node = store.get_live_node(campaign, node_id)
    return jsonify(store.list_for_node(node))


@edges_bp.route('/nodes/<node_id>/available-targets')
@login_required
def available_targets(slug, node_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    return jsonify(store.available_targets(campaign, node_id))


@edges_bp.route('/edges', methods=['POST'])
@login_required
def create_edge(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    data = v.json_body()

    errors = {}
    source_id = v.uuid_string(data, 'source_node_id', errors, required=True)
    target_id = v.uuid_string(data, 'target_node_id', errors, required=True)
    edge_type = v.string(data, 'type', errors, required=True, max_length=store.TYPE_MAX_LENGTH)
    label = v.string(data, 'label', errors, max_length=store.LABEL_MAX_LENGTH)
    strength = v.integer(data, 'strength', errors,
                         min_value=store.STRENGTH_MIN, max_value=store.STRENGTH_MAX)
    is_secret = v.boolean(data, 'is_secret', errors)
    bidirectional = v.boolean(data, 'bidirectional', errors)
    metadata = v.mapping(data, 'metadata', errors) or None
    v.raise_if_errors(errors)

    edge, reverse_edge = store.create_edge(
        campaign, source_id, target_id, edge_type,
        label=label, strength=strength, is_secret=is_secret,
        bidirectional=bidirectional, metadata=metadata,
    )
    return jsonify({
        'edge': edge.to_dict(),
        'reverse_edge': reverse_edge.to_dict() if reverse_edge else None,
        'message': 'Relationship created successfully.',
    }), 201


@edges_bp.route('/edges/<int:edge_id>', methods=['PUT'])
@login_required
def update_edge(slug, edge_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    edge = store.get_edge(campaign, edge_id)
    data = v.json_body()

    # Only the keys actually sent are changed
    errors = {}
    fields = {}
    if 'type' in data:
        fields['type'] = v.string(data, 'type', errors, required=True, max_length=store.TYPE_MAX_LENGTH)
    if 'label' in data:
        fields['label'] = v.string(data, 'label', errors, max_length=store.LABEL_MAX_LENGTH)
    if 'strength' in data:
        fields['strength'] = v.integer(data, 'strength', errors,
                                       min_value=store.STRENGTH_MIN, max_value=store.STRENGTH_MAX)
    if 'is_secret' in data:
        fields['is_secret'] = v.boolean(data, 'is_secret', errors)
    if 'metadata' in data:
        fields['metadata'] = v.mapping(data, 'metadata', errors) or None
    v.raise_if_errors(errors)

    edge = store.update_edge(edge, fields)
    return jsonify({'edge': edge.to_dict(), 'message': 'Relationship updated successfully.'})


@edges_bp.route('/edges/<int:edge_id>', methods=['DELETE'])
@login_required
def delete_edge(slug, edge_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    store.delete_edge(store.get_edge(campaign, edge_id))
    return jsonify({'message': 'Relationship deleted successfully.'})
