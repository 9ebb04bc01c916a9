"""Campaign search: substring match over node names/summaries and session text.

Results are merged, ranked (names starting with the query first, then
alphabetical) and grouped by plural type key for the search dropdown.
"""

from flask import current_app, url_for
from sqlalchemy import or_

from forge.models import Node, GameSession
from forge.taxonomy import NODE_TYPES, pluralize
from forge.utils import escape_like

MIN_QUERY_LENGTH = 2

# Group order in the response
RESULT_GROUPS = ['characters', 'places', 'items', 'factions', 'plots', 'sessions']


def _url_for_node(campaign, node):
    if node.type in NODE_TYPES:
        return url_for('nodes.show_node', slug=campaign.slug,
                       collection=pluralize(node.type), node_slug=node.slug)
    return url_for('campaigns.show_campaign', slug=campaign.slug)


def _search_nodes(campaign, pattern, type_filter):
    query = (Node.live()
             .filter(Node.campaign_id == campaign.id)
             .filter(or_(Node.name.ilike(pattern, escape='\\'),
                         Node.summary.ilike(pattern, escape='\\'))))
    if type_filter in NODE_TYPES:
        query = query.filter(Node.type == type_filter)
    nodes = query.order_by(Node.name).limit(current_app.config.get('SEARCH_NODE_LIMIT', 20)).all()

    return [{
        'id': node.id,
        'type': node.type,
        'subtype': node.subtype,
        'name': node.name,
        'slug': node.slug,
        'summary': node.summary,
        'is_secret': bool(node.is_secret),
        'url': _url_for_node(campaign, node),
    } for node in nodes]


def _search_sessions(campaign, pattern):
    sessions = (GameSession.query
                .filter(GameSession.campaign_id == campaign.id)
                .filter(or_(GameSession.title.ilike(pattern, escape='\\'),
                            GameSession.notes.ilike(pattern, escape='\\'),
                            GameSession.recap.ilike(pattern, escape='\\')))
                .order_by(GameSession.number.desc())
                .limit(current_app.config.get('SEARCH_SESSION_LIMIT', 10))
                .all())

    return [{
        'id': s.id,
        'type': 'session',
        'subtype': s.status,
        'name': s.display_name,
        'slug': str(s.number),
        'summary': None,
        'is_secret': False,
        'url': url_for('sessions.show_session', slug=campaign.slug, number=s.number),
    } for s in sessions]


def rank(results, query):
    """Names that start with query first, then case-insensitive alphabetical."""
    needle = query.lower()
    return sorted(results, key=lambda r: (not r['name'].lower().startswith(needle), r['name'].lower()))


def search(campaign, query, type_filter=None):
    query = (query or '').strip()
    if len(query) < MIN_QUERY_LENGTH:
        return {'results': {}, 'total': 0, 'query': query}

    pattern = f'%{escape_like(query)}%'
    # Nodes are always searched; a non-node filter just leaves them unfiltered
    results = _search_nodes(campaign, pattern, type_filter)
    if not type_filter or type_filter == 'session':
        results.extend(_search_sessions(campaign, pattern))

    grouped = {key: [] for key in RESULT_GROUPS}
    for result in rank(results, query):
        key = pluralize(result['type'])
        if key in grouped:
            grouped[key].append(result)

    return {
        'results': {key: items for key, items in grouped.items() if items},
        'total': len(results),
        'query': query,
    }
