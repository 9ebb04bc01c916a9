from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from forge import db
from forge import validation as v
from forge.models import Campaign, Node, GameSession
from forge.taxonomy import CAMPAIGN_STATUSES, GENRES, RULE_SYSTEMS
from forge.utils import slugify, unique_slug

campaigns_bp = Blueprint('campaigns', __name__, url_prefix='/campaigns')

# Node types counted on the campaign dashboard
STAT_TYPES = ['character', 'place', 'plot']


def _clean_campaign(data, errors):
    """Fields shared by create and update."""
    return {
        'name': v.string(data, 'name', errors, required=True, max_length=255),
        'description': v.string(data, 'description', errors),
        'genre': v.string(data, 'genre', errors, max_length=50),
        'rule_system': v.string(data, 'rule_system', errors, max_length=50),
        'player_count': v.integer(data, 'player_count', errors, min_value=1, max_value=20),
    }


@campaigns_bp.route('', methods=['GET'])
@login_required
def list_campaigns():
    campaigns = (Campaign.query
                 .filter_by(user_id=current_user.id)
                 .order_by(Campaign.created_at.desc(), Campaign.id.desc())
                 .all())
    return jsonify({
        'campaigns': [c.to_dict() for c in campaigns],
        'genres': GENRES,
        'rule_systems': RULE_SYSTEMS,
    })


@campaigns_bp.route('', methods=['POST'])
@login_required
def create_campaign():
    errors = {}
    fields = _clean_campaign(v.json_body(), errors)
    base = slugify(fields['name']) if fields['name'] else None
    if fields['name'] and not base:
        errors['name'] = 'The name must contain at least one letter or number.'
    v.raise_if_errors(errors)

    # Campaign slugs are global, so check against every user's campaigns
    slug = unique_slug(base, lambda s: Campaign.query.filter_by(slug=s).first() is not None)
    campaign = Campaign(user_id=current_user.id, slug=slug, **fields)
    if campaign.rule_system is None:
        campaign.rule_system = '5e'
    db.session.add(campaign)
    db.session.commit()

    current_app.logger.info(f'Campaign {campaign.id} created: "{campaign.name}" ({campaign.slug})')
    return jsonify({'campaign': campaign.to_dict(), 'message': 'Campaign created successfully!'}), 201


@campaigns_bp.route('/<slug>', methods=['GET'])
@login_required
def show_campaign(slug):
    campaign = Campaign.get_owned(slug, current_user.id)

    stats = {}
    for node_type in STAT_TYPES:
        stats[f'{node_type}s'] = Node.live().filter_by(campaign_id=campaign.id, type=node_type).count()
    stats['sessions'] = GameSession.query.filter_by(campaign_id=campaign.id).count()

    recent_nodes = (Node.live()
                    .filter_by(campaign_id=campaign.id)
                    .order_by(Node.created_at.desc())
                    .limit(5)
                    .all())
    sessions = (GameSession.query
                .filter_by(campaign_id=campaign.id)
                .order_by(GameSession.number.desc())
                .limit(5)
                .all())

    return jsonify({
        'campaign': campaign.to_dict(),
        'stats': stats,
        'recent_nodes': [dict(n.to_brief(), summary=n.summary) for n in recent_nodes],
        'sessions': [s.to_dict() for s in sessions],
    })


@campaigns_bp.route('/<slug>', methods=['PUT'])
@login_required
def update_campaign(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    data = v.json_body()

    errors = {}
    fields = _clean_campaign(data, errors)
    fields['status'] = v.choice(data, 'status', CAMPAIGN_STATUSES, errors, default=campaign.status)
    fields['tone_settings'] = v.mapping(data, 'tone_settings', errors) or None
    fields['settings'] = v.mapping(data, 'settings', errors) or None
    v.raise_if_errors(errors)

    # The slug stays put on rename so existing links keep working
    for key, value in fields.items():
        setattr(campaign, key, value)
    if campaign.rule_system is None:
        campaign.rule_system = '5e'
    db.session.commit()

    current_app.logger.info(f'Campaign {campaign.id} updated')
    return jsonify({'campaign': campaign.to_dict(), 'message': 'Campaign updated successfully!'})


@campaigns_bp.route('/<slug>', methods=['DELETE'])
@login_required
def delete_campaign(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    name = campaign.name
    db.session.delete(campaign)
    db.session.commit()

    current_app.logger.info(f'Campaign "{name}" deleted with all of its records')
    return jsonify({'message': f'Campaign "{name}" deleted.'})
