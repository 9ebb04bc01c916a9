from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from forge.models import Campaign
from forge.search import search

search_bp = Blueprint('search', __name__, url_prefix='/campaigns/<slug>')


@search_bp.route('/search')
@login_required
def campaign_search(slug):
    """GET /campaigns/<slug>/search?q=ara&type=character"""
    campaign = Campaign.get_owned(slug, current_user.id)
    return jsonify(search(campaign, request.args.get('q', ''), request.args.get('type') or None))
