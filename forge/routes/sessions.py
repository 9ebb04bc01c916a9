from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from forge import db
from forge import validation as v
from forge.errors import ConflictError, NotFoundError
from forge.models import Campaign, GameSession
from forge.taxonomy import SESSION_STATUSES, SESSION_PLAN_FIELDS, SESSION_OUTCOME_FIELDS
from forge.utils import render_markdown

sessions_bp = Blueprint('sessions', __name__, url_prefix='/campaigns/<slug>/sessions')

DUPLICATE_NUMBER = 'A session with this number already exists.'


def _get_session(campaign, number):
    game_session = GameSession.query.filter_by(campaign_id=campaign.id, number=number).first()
    if game_session is None:
        raise NotFoundError('Session not found.')
    return game_session


def _clean_session(data):
    errors = {}
    fields = {
        'number': v.integer(data, 'number', errors, required=True, min_value=0),
        'title': v.string(data, 'title', errors, max_length=255),
        'status': v.choice(data, 'status', list(SESSION_STATUSES), errors, default='planned'),
        'planned_date': v.iso_date(data, 'planned_date', errors),
        'actual_date': v.iso_date(data, 'actual_date', errors),
        'plan': v.mapping(data, 'plan', errors, string_fields=SESSION_PLAN_FIELDS),
        'notes': v.string(data, 'notes', errors),
        'recap': v.string(data, 'recap', errors),
        'outcomes': v.mapping(data, 'outcomes', errors, string_fields=SESSION_OUTCOME_FIELDS),
    }
    v.raise_if_errors(errors)
    return fields


def _number_taken(campaign, number):
    return GameSession.query.filter_by(campaign_id=campaign.id, number=number).first() is not None


def _commit_or_conflict():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning('Session number collision rejected by the database')
        raise ConflictError(DUPLICATE_NUMBER, field='number')


def next_session_number(campaign):
    """One past the highest number, or 0 (session zero) for a campaign with no sessions."""
    highest = (db.session.query(func.max(GameSession.number))
               .filter(GameSession.campaign_id == campaign.id)
               .scalar())
    return 0 if highest is None else highest + 1


@sessions_bp.route('', methods=['GET'])
@login_required
def list_sessions(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    sessions = GameSession.query.filter_by(campaign_id=campaign.id).order_by(GameSession.number).all()
    return jsonify({
        'sessions': [s.to_dict() for s in sessions],
        'statuses': SESSION_STATUSES,
    })


@sessions_bp.route('/next-number')
@login_required
def next_number(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    return jsonify({'next_number': next_session_number(campaign)})


@sessions_bp.route('', methods=['POST'])
@login_required
def create_session(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    fields = _clean_session(v.json_body())

    if _number_taken(campaign, fields['number']):
        raise ConflictError(DUPLICATE_NUMBER, field='number')

    game_session = GameSession(campaign_id=campaign.id, **fields)
    db.session.add(game_session)
    _commit_or_conflict()

    current_app.logger.info(f'Session {game_session.number} created in campaign {campaign.id}')
    return jsonify({'session': game_session.to_dict(), 'message': 'Session created successfully.'}), 201


@sessions_bp.route('/<int:number>', methods=['GET'])
@login_required
def show_session(slug, number):
    campaign = Campaign.get_owned(slug, current_user.id)
    game_session = _get_session(campaign, number)

    previous = (GameSession.query
                .filter(GameSession.campaign_id == campaign.id, GameSession.number < number)
                .order_by(GameSession.number.desc())
                .first())
    following = (GameSession.query
                 .filter(GameSession.campaign_id == campaign.id, GameSession.number > number)
                 .order_by(GameSession.number)
                 .first())

    data = game_session.to_dict()
    data['notes_html'] = render_markdown(game_session.notes)
    data['recap_html'] = render_markdown(game_session.recap)
    return jsonify({
        'session': data,
        'previous': {'number': previous.number, 'title': previous.display_name} if previous else None,
        'next': {'number': following.number, 'title': following.display_name} if following else None,
    })


@sessions_bp.route('/<int:number>', methods=['PUT'])
@login_required
def update_session(slug, number):
    campaign = Campaign.get_owned(slug, current_user.id)
    game_session = _get_session(campaign, number)
    fields = _clean_session(v.json_body())

    if fields['number'] != number and _number_taken(campaign, fields['number']):
        raise ConflictError(DUPLICATE_NUMBER, field='number')

    for key, value in fields.items():
        setattr(game_session, key, value)
    _commit_or_conflict()

    current_app.logger.info(f'Session {game_session.number} updated in campaign {campaign.id}')
    return jsonify({'session': game_session.to_dict(), 'message': 'Session updated successfully.'})


@sessions_bp.route('/<int:number>', methods=['DELETE'])
@login_required
def delete_session(slug, number):
    campaign = Campaign.get_owned(slug, current_user.id)
    game_session = _get_session(campaign, number)
    db.session.delete(game_session)
    db.session.commit()

    current_app.logger.info(f'Session {number} deleted from campaign {campaign.id}')
    return jsonify({'message': 'Session deleted successfully.'})
