"""
forge/edges.py: Relationship store

Directed, typed edges between two live nodes of one campaign. Creating an
edge can also create its reverse ("parent_of" A→B brings "child_of" B→A)
in the same transaction.

Duplicates are refused twice over: a friendly pre-check here, and the
(campaign, source, target, type) unique constraint on the table, whose
IntegrityError is turned into the same ConflictError.
"""

from flask import current_app
from sqlalchemy.exc import IntegrityError

from forge import db
from forge import relationship_types as catalog
from forge.errors import ValidationError, NotFoundError, ConflictError
from forge.models import Edge, Node
from forge.taxonomy import type_label

DUPLICATE_MESSAGE = 'This relationship already exists.'

TYPE_MAX_LENGTH = 50
LABEL_MAX_LENGTH = 100
STRENGTH_MIN = 1
STRENGTH_MAX = 10


def get_live_node(campaign, node_id):
    """Return the live node node_id of campaign, or raise NotFoundError."""
    node = Node.live().filter_by(campaign_id=campaign.id, id=node_id).first()
    if node is None:
        raise NotFoundError('Node not found.')
    return node


def get_edge(campaign, edge_id):
    edge = Edge.query.filter_by(campaign_id=campaign.id, id=edge_id).first()
    if edge is None:
        raise NotFoundError('Relationship not found.')
    return edge


def _find(campaign_id, source_id, target_id, edge_type):
    return Edge.query.filter_by(
        campaign_id=campaign_id,
        source_node_id=source_id,
        target_node_id=target_id,
        type=edge_type,
    ).first()


def _check_attributes(edge_type, label, strength, errors):
    # Types outside the catalog are allowed; they get a humanized label
    if not isinstance(edge_type, str) or not edge_type.strip():
        errors['type'] = 'The type field is required.'
    elif len(edge_type) > TYPE_MAX_LENGTH:
        errors['type'] = f'The type field must not be greater than {TYPE_MAX_LENGTH} characters.'
    elif edge_type == catalog.CUSTOM_TYPE and not label:
        errors['label'] = 'A label is required for custom relationships.'
    if label is not None and len(label) > LABEL_MAX_LENGTH:
        errors['label'] = f'The label field must not be greater than {LABEL_MAX_LENGTH} characters.'
    if strength is not None and not STRENGTH_MIN <= strength <= STRENGTH_MAX:
        errors['strength'] = f'The strength field must be between {STRENGTH_MIN} and {STRENGTH_MAX}.'


def add_edge(campaign, source, target, edge_type, label=None, strength=None,
             is_secret=False, metadata=None):
    """Stage an edge between two already-resolved nodes. Does not flush or commit."""
    edge = Edge(
        campaign_id=campaign.id,
        source_node=source,
        target_node=target,
        type=edge_type,
        label=label or catalog.label_for_type(edge_type),
        strength=strength,
        is_secret=bool(is_secret),
        meta=metadata,
    )
    db.session.add(edge)
    return edge


def clear_reference(edge):
    """Drop the parent_id/headquarters_id mirror that edge backs on its source node, if any."""
    source = edge.source_node
    reference = catalog.REFERENCE_FIELDS.get(source.type)
    if reference is None or reference[1] != edge.type or not source.meta:
        return
    key = reference[0]
    if source.meta.get(key) == edge.target_node_id:
        meta = dict(source.meta)
        meta.pop(key)
        source.meta = meta


def _flush_or_conflict():
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.warning(f'Edge insert rejected by the database: {e.orig}')
        raise ConflictError(DUPLICATE_MESSAGE)


def create_edge(campaign, source_id, target_id, edge_type, label=None, strength=None,
                is_secret=False, bidirectional=False, metadata=None):
    """Create source -[edge_type]-> target, plus the reverse edge if bidirectional.

    Returns (edge, reverse_edge). reverse_edge is None when bidirectional is
    off or when the reverse relationship was already recorded.
    """
    errors = {}
    if source_id == target_id:
        errors['target_node_id'] = 'A node cannot be related to itself.'
    _check_attributes(edge_type, label, strength, errors)
    if errors:
        raise ValidationError(errors)

    source = get_live_node(campaign, source_id)
    target = get_live_node(campaign, target_id)

    if _find(campaign.id, source.id, target.id, edge_type):
        current_app.logger.warning(
            f'Duplicate edge refused: {edge_type} ({source.name} -> {target.name})')
        raise ConflictError(DUPLICATE_MESSAGE)

    edge = add_edge(campaign, source, target, edge_type, label=label, strength=strength,
                    is_secret=is_secret, metadata=metadata)

    reverse_edge = None
    if bidirectional:
        reverse = catalog.reverse_type(edge_type)
        with db.session.no_autoflush:
            reverse_exists = _find(campaign.id, target.id, source.id, reverse) is not None
        if not reverse_exists:
            # A custom relationship has no catalog label worth showing
            reverse_label = label if reverse == catalog.CUSTOM_TYPE else None
            reverse_edge = add_edge(campaign, target, source, reverse, label=reverse_label,
                                    strength=strength, is_secret=is_secret)

    _flush_or_conflict()
    db.session.commit()

    current_app.logger.info(
        f'Edge {edge.id} created: {edge.type} ({source.name} -> {target.name})')
    if reverse_edge is not None:
        current_app.logger.info(
            f'Edge {reverse_edge.id} created: {reverse_edge.type} ({target.name} -> {source.name})')
    return edge, reverse_edge


def update_edge(edge, fields):
    """Apply a partial update. Keys absent from fields are left alone.

    The reverse edge, if any, is not touched.
    """
    edge_type = fields.get('type', edge.type)
    label = fields['label'] if 'label' in fields else edge.label
    strength = fields['strength'] if 'strength' in fields else edge.strength

    errors = {}
    _check_attributes(edge_type, label, strength, errors)
    if errors:
        raise ValidationError(errors)

    if edge_type != edge.type:
        clear_reference(edge)
    edge.type = edge_type
    edge.label = label or catalog.label_for_type(edge_type)
    edge.strength = strength
    if 'is_secret' in fields:
        edge.is_secret = bool(fields['is_secret'])
    if 'metadata' in fields:
        edge.meta = fields['metadata']

    _flush_or_conflict()
    db.session.commit()
    current_app.logger.info(f'Edge {edge.id} updated: {edge.type}')
    return edge


def delete_edge(edge):
    """Hard-delete one edge. Its reverse (if any) survives."""
    edge_id = edge.id
    clear_reference(edge)
    db.session.delete(edge)
    db.session.commit()
    current_app.logger.info(f'Edge {edge_id} deleted')


def list_for_node(node):
    """Live edges touching node, split by direction."""
    outgoing = (Edge.query
                .join(Node, Edge.target_node_id == Node.id)
                .filter(Edge.source_node_id == node.id, Node.deleted_at.is_(None))
                .order_by(Edge.type, Node.name)
                .all())
    incoming = (Edge.query
                .join(Node, Edge.source_node_id == Node.id)
                .filter(Edge.target_node_id == node.id, Node.deleted_at.is_(None))
                .order_by(Edge.type, Node.name)
                .all())
    return {
        'outgoing': [e.to_dict() for e in outgoing],
        'incoming': [e.to_dict() for e in incoming],
        'node': {'id': node.id, 'name': node.name, 'type': node.type},
    }


def available_targets(campaign, exclude_node_id):
    """Every live node except exclude_node_id, grouped by type for a picker."""
    nodes = (Node.live()
             .filter(Node.campaign_id == campaign.id, Node.id != exclude_node_id)
             .order_by(Node.type, Node.name)
             .all())

    groups = []
    for node in nodes:
        if not groups or groups[-1]['type'] != node.type:
            groups.append({'type': node.type, 'label': type_label(node.type), 'nodes': []})
        groups[-1]['nodes'].append(node.to_brief())

    return {'groups': groups, 'all': [node.to_brief() for node in nodes]}


def edges_of_type(node, edge_type, direction='outgoing'):
    """Live neighbours of node across edges of one type, ordered by name."""
    if direction == 'outgoing':
        join_on, own_end = Edge.target_node_id == Node.id, Edge.source_node_id
    else:
        join_on, own_end = Edge.source_node_id == Node.id, Edge.target_node_id
    return (Node.live()
            .join(Edge, join_on)
            .filter(own_end == node.id, Edge.type == edge_type)
            .order_by(Node.name)
            .all())


def replace_outgoing(campaign, node, edge_type, target):
    """Make target the only edge_type neighbour of node (or drop them all if target is None).

    Stages the change; the caller commits.
    """
    kept = None
    for edge in list(node.outgoing_edges):
        if edge.type != edge_type:
            continue
        # Inserts flush before deletes, so an edge to the same target is kept, not recreated
        if target is not None and kept is None and edge.target_node_id == target.id:
            kept = edge
            continue
        db.session.delete(edge)
    if target is not None and kept is None:
        add_edge(campaign, node, target, edge_type)
