"""
forge/nodes.py: Entity store

Characters, places, items, factions and plots all live in one `nodes`
table, told apart by `type`. This module validates payloads against the
taxonomy, keeps slugs unique within a campaign, and writes the
cross-reference edges that places (parent) and factions (headquarters)
carry.

Deletion is soft: a deleted node keeps its row (and its slug) until it is
purged from the trash, but loses its edges and tag links straight away.
"""

from datetime import datetime

from flask import current_app

from forge import db
from forge import validation as v
from forge.edges import clear_reference, edges_of_type, list_for_node, replace_outgoing
from forge.errors import ValidationError, NotFoundError
from forge.models import Node, Tag
from forge.relationship_types import REFERENCE_FIELDS
from forge.taxonomy import (NODE_SUBTYPES, CONTENT_FIELDS, CONTENT_MAPPINGS,
                            CONFIDENCE_LEVELS, PLACE_CONTAINER_SUBTYPES)
from forge.utils import slugify, unique_slug


def _slug_taken(campaign_id, slug, exclude_id=None):
    # Tombstoned rows still hold their slug until purged
    query = Node.query.filter_by(campaign_id=campaign_id, slug=slug)
    if exclude_id is not None:
        query = query.filter(Node.id != exclude_id)
    return query.first() is not None


def _assign_slug(node, campaign_id, name, errors):
    base = slugify(name)
    if not base:
        errors['name'] = 'The name must contain at least one letter or number.'
        return None
    if node is not None and node.slug == base:
        return base
    exclude_id = node.id if node is not None else None
    return unique_slug(base, lambda s: _slug_taken(campaign_id, s, exclude_id))


def _clean(campaign, node_type, data, node=None):
    """Validate a full node payload. Returns the cleaned fields or raises ValidationError."""
    errors = {}
    cleaned = {
        'name': v.string(data, 'name', errors, required=True, max_length=255),
        'subtype': v.choice(data, 'subtype', list(NODE_SUBTYPES[node_type]), errors, required=True),
        'summary': v.string(data, 'summary', errors, max_length=500),
        'content': v.mapping(data, 'content', errors,
                             string_fields=CONTENT_FIELDS[node_type],
                             mapping_fields=CONTENT_MAPPINGS.get(node_type, ())),
        'metadata': v.mapping(data, 'metadata', errors),
        'confidence': v.choice(data, 'confidence', list(CONFIDENCE_LEVELS), errors, default='canon'),
        'is_secret': v.boolean(data, 'is_secret', errors),
        'reference': None,
    }

    if node_type in REFERENCE_FIELDS:
        key, _edge_type = REFERENCE_FIELDS[node_type]
        ref_id = v.uuid_string(data, key, errors)
        if ref_id is not None:
            if node is not None and ref_id == node.id:
                errors[key] = 'A node cannot reference itself.'
            else:
                query = Node.live().filter_by(campaign_id=campaign.id, id=ref_id, type='place')
                if key == 'parent_id':
                    # Same set the parent picker offers
                    query = query.filter(Node.subtype.in_(PLACE_CONTAINER_SUBTYPES))
                target = query.first()
                if target is None:
                    errors[key] = f'The selected {key.replace("_", " ")} is invalid.'
                cleaned['reference'] = target

    if cleaned['name'] is not None:
        cleaned['slug'] = _assign_slug(node, campaign.id, cleaned['name'], errors)

    v.raise_if_errors(errors)
    return cleaned


def _apply(campaign, node, node_type, cleaned):
    node.subtype = cleaned['subtype']
    node.name = cleaned['name']
    node.slug = cleaned['slug']
    node.summary = cleaned['summary']
    node.content = cleaned['content']
    node.confidence = cleaned['confidence']
    node.is_secret = cleaned['is_secret']

    meta = dict(node.meta or {})
    meta.update(cleaned['metadata'])
    if node_type in REFERENCE_FIELDS:
        key, edge_type = REFERENCE_FIELDS[node_type]
        target = cleaned['reference']
        if target is not None:
            meta[key] = target.id
        else:
            meta.pop(key, None)
        replace_outgoing(campaign, node, edge_type, target)
    node.meta = meta


def get_node(campaign, node_type, slug):
    node = Node.live().filter_by(campaign_id=campaign.id, type=node_type, slug=slug).first()
    if node is None:
        raise NotFoundError(f'{node_type.capitalize()} not found.')
    return node


def create_node(campaign, node_type, data):
    if node_type not in NODE_SUBTYPES:
        raise ValidationError({'type': f'The selected type is invalid. Expected one of: {", ".join(NODE_SUBTYPES)}.'})

    cleaned = _clean(campaign, node_type, data)
    node = Node(campaign_id=campaign.id, type=node_type)
    db.session.add(node)
    _apply(campaign, node, node_type, cleaned)
    db.session.commit()

    current_app.logger.info(f'Node {node.id} created: {node.type} "{node.name}"')
    return node


def update_node(node, data):
    """Full update: every field is rewritten from data, like the create form."""
    campaign = node.campaign
    cleaned = _clean(campaign, node.type, data, node=node)
    _apply(campaign, node, node.type, cleaned)
    db.session.commit()

    current_app.logger.info(f'Node {node.id} updated: {node.type} "{node.name}"')
    return node


def rename_node(node, new_name):
    errors = {}
    name = v.string({'name': new_name}, 'name', errors, required=True, max_length=255)
    slug = _assign_slug(node, node.campaign_id, name, errors) if name else None
    v.raise_if_errors(errors)

    old_name = node.name
    node.name = name
    node.slug = slug
    db.session.commit()

    current_app.logger.info(f'Node {node.id} renamed: "{old_name}" -> "{name}"')
    return node


def list_nodes(campaign, node_type, subtypes=None, tag=None):
    query = Node.live().filter_by(campaign_id=campaign.id, type=node_type)
    if subtypes:
        query = query.filter(Node.subtype.in_(subtypes))
    if tag:
        query = query.filter(Node.tags.any(Tag.name == tag.strip().lower()))
    return query.order_by(Node.name).all()


def parent_place_options(campaign, exclude_id=None):
    """Places that can contain other places (worlds down to towns)."""
    query = (Node.live()
             .filter_by(campaign_id=campaign.id, type='place')
             .filter(Node.subtype.in_(PLACE_CONTAINER_SUBTYPES)))
    if exclude_id:
        query = query.filter(Node.id != exclude_id)
    return query.order_by(Node.name).all()


def delete_node(node):
    """Soft-delete node, dropping every edge that touches it and its tag links."""
    for edge in list(node.incoming_edges) + list(node.outgoing_edges):
        clear_reference(edge)
        db.session.delete(edge)

    node.tags = []
    node.deleted_at = datetime.utcnow()
    db.session.commit()

    current_app.logger.info(f'Node {node.id} moved to trash: {node.type} "{node.name}"')


def list_deleted(campaign):
    return (Node.query
            .filter(Node.campaign_id == campaign.id, Node.deleted_at.isnot(None))
            .order_by(Node.deleted_at.desc())
            .all())


def get_deleted(campaign, node_id):
    node = (Node.query
            .filter(Node.campaign_id == campaign.id, Node.id == node_id, Node.deleted_at.isnot(None))
            .first())
    if node is None:
        raise NotFoundError('Node not found in trash.')
    return node


def restore_node(node):
    """Bring a node back from the trash. Its old edges stay gone."""
    node.deleted_at = None
    db.session.commit()
    current_app.logger.info(f'Node {node.id} restored: {node.type} "{node.name}"')
    return node


def purge_node(node):
    node_id = node.id
    db.session.delete(node)
    db.session.commit()
    current_app.logger.info(f'Node {node_id} purged')


def _mutual(node, edge_type):
    """Neighbours over edge_type in either direction, deduplicated, never node itself."""
    seen = {}
    for other in edges_of_type(node, edge_type, 'outgoing') + edges_of_type(node, edge_type, 'incoming'):
        if other.id != node.id:
            seen.setdefault(other.id, other)
    return sorted(seen.values(), key=lambda n: n.name.lower())


def describe_node(node):
    """Everything the show page needs: the node, its edges and type-specific neighbours."""
    data = {'node': node.to_dict(), 'relationships': list_for_node(node)}

    if node.type == 'place':
        parents = edges_of_type(node, 'located_in', 'outgoing')
        contained = edges_of_type(node, 'located_in', 'incoming')
        data['parent'] = parents[0].to_brief() if parents else None
        data['child_places'] = [n.to_brief() for n in contained if n.type == 'place']
        data['characters'] = [n.to_brief() for n in contained if n.type == 'character']

    elif node.type == 'faction':
        headquarters = edges_of_type(node, 'headquartered_in', 'outgoing')
        data['headquarters'] = headquarters[0].to_brief() if headquarters else None
        data['members'] = [n.to_brief() for n in edges_of_type(node, 'member_of', 'incoming')]
        data['allies'] = [n.to_brief() for n in _mutual(node, 'allied_with') if n.type == 'faction']
        data['rivals'] = [n.to_brief() for n in _mutual(node, 'rivals_with') if n.type == 'faction']

    return data
