import re
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from forge import db
from forge import validation as v
from forge.edges import get_live_node
from forge.errors import ConflictError, NotFoundError, ValidationError
from forge.models import Campaign, Node, Tag, get_or_create_tags

tags_bp = Blueprint('tags', __name__, url_prefix='/campaigns/<slug>')

HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


def _get_tag(campaign, tag_id):
    tag = Tag.query.filter_by(campaign_id=campaign.id, id=tag_id).first()
    if tag is None:
        raise NotFoundError('Tag not found.')
    return tag


def _clean_tag(data, errors, required=True):
    name = v.string(data, 'name', errors, required=required, max_length=100)
    color = v.string(data, 'color', errors, max_length=7)
    if color and not HEX_COLOR.match(color):
        errors['color'] = 'The color must be a hex value like #6b7280.'
    return (name.lower() if name else None), (color.lower() if color else None)


def _check_name_free(campaign, name, tag_id=None):
    existing = Tag.query.filter_by(campaign_id=campaign.id, name=name).first()
    if existing and existing.id != tag_id:
        raise ConflictError(f'A tag named "{name}" already exists.', field='name')


@tags_bp.route('/tags', methods=['GET'])
@login_required
def list_tags(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    tags = Tag.query.filter_by(campaign_id=campaign.id).order_by(Tag.name).all()

    # Usage count per tag, over live nodes only
    results = []
    for tag in tags:
        data = tag.to_dict()
        data['usage'] = Node.live().filter(Node.campaign_id == campaign.id, Node.tags.contains(tag)).count()
        results.append(data)
    return jsonify({'tags': results})


@tags_bp.route('/tags', methods=['POST'])
@login_required
def create_tag(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    errors = {}
    name, color = _clean_tag(v.json_body(), errors)
    v.raise_if_errors(errors)
    _check_name_free(campaign, name)

    tag = Tag(campaign_id=campaign.id, name=name, color=color or '#6b7280')
    db.session.add(tag)
    db.session.commit()

    current_app.logger.info(f'Tag "{name}" created in campaign {campaign.id}')
    return jsonify({'tag': tag.to_dict(), 'message': f'Tag "{name}" created.'}), 201


@tags_bp.route('/tags/<int:tag_id>', methods=['PUT'])
@login_required
def update_tag(slug, tag_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    tag = _get_tag(campaign, tag_id)

    errors = {}
    name, color = _clean_tag(v.json_body(), errors, required=False)
    v.raise_if_errors(errors)

    if name:
        # Check for name collision with another existing tag in this campaign
        _check_name_free(campaign, name, tag_id=tag.id)
        tag.name = name
    if color:
        tag.color = color
    db.session.commit()

    return jsonify({'tag': tag.to_dict(), 'message': 'Tag updated.'})


@tags_bp.route('/tags/<int:tag_id>', methods=['DELETE'])
@login_required
def delete_tag(slug, tag_id):
    campaign = Campaign.get_owned(slug, current_user.id)
    tag = _get_tag(campaign, tag_id)
    name = tag.name
    db.session.delete(tag)
    db.session.commit()

    current_app.logger.info(f'Tag "{name}" deleted from campaign {campaign.id}')
    return jsonify({'message': f'Tag "{name}" deleted and removed from all entries.'})


@tags_bp.route('/nodes/<node_id>/tags', methods=['PUT'])
@login_required
def set_node_tags(slug, node_id):
    """Replace a node's tags with a comma-separated list, e.g. {"tags": "undead, boss"}."""
    campaign = Campaign.get_owned(slug, current_user.id)
    node = get_live_node(campaign, node_id)

    tag_string = v.json_body().get('tags', '')
    if not isinstance(tag_string, str):
        raise ValidationError({'tags': 'The tags field must be a comma-separated string.'})

    node.tags = get_or_create_tags(campaign.id, tag_string)
    db.session.commit()
    return jsonify({'node': node.to_dict(), 'message': 'Tags updated.'})
