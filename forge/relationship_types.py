"""
forge/relationship_types.py: The relationship type catalog

A static table of every edge type a campaign can use. Categories only
group the types for pickers; an edge stores its type as a flat string.

Each entry is one of:
  {'value', 'label', 'bidirectional': True}   symmetric ("knows")
  {'value', 'label', 'reverse': <value>}      asymmetric pair ("parent_of")
  {'value', 'label'}                          no natural inverse ("member_of")

The flat index below is built once at import time and never rebuilt.
"""

CATEGORIES = {
    'social': [
        {'value': 'knows', 'label': 'Knows', 'bidirectional': True},
        {'value': 'friends_with', 'label': 'Friends with', 'bidirectional': True},
        {'value': 'allied_with', 'label': 'Allied with', 'bidirectional': True},
        {'value': 'enemies_with', 'label': 'Enemies with', 'bidirectional': True},
        {'value': 'rivals_with', 'label': 'Rivals with', 'bidirectional': True},
        {'value': 'related_to', 'label': 'Related to', 'bidirectional': True},
        {'value': 'married_to', 'label': 'Married to', 'bidirectional': True},
        {'value': 'parent_of', 'label': 'Parent of', 'reverse': 'child_of'},
        {'value': 'child_of', 'label': 'Child of', 'reverse': 'parent_of'},
        {'value': 'sibling_of', 'label': 'Sibling of', 'bidirectional': True},
    ],
    'hierarchy': [
        {'value': 'serves', 'label': 'Serves', 'reverse': 'commands'},
        {'value': 'commands', 'label': 'Commands', 'reverse': 'serves'},
        {'value': 'employs', 'label': 'Employs', 'reverse': 'employed_by'},
        {'value': 'employed_by', 'label': 'Employed by', 'reverse': 'employs'},
        {'value': 'mentors', 'label': 'Mentors', 'reverse': 'mentored_by'},
        {'value': 'mentored_by', 'label': 'Mentored by', 'reverse': 'mentors'},
    ],
    'organization': [
        {'value': 'member_of', 'label': 'Member of'},
        {'value': 'leads', 'label': 'Leads'},
        {'value': 'founded', 'label': 'Founded'},
        {'value': 'headquartered_in', 'label': 'Headquartered in'},
    ],
    'location': [
        {'value': 'located_in', 'label': 'Located in'},
        {'value': 'lives_in', 'label': 'Lives in'},
        {'value': 'rules_over', 'label': 'Rules over'},
        {'value': 'visited', 'label': 'Visited'},
        {'value': 'born_in', 'label': 'Born in'},
    ],
    'possession': [
        {'value': 'owns', 'label': 'Owns', 'reverse': 'owned_by'},
        {'value': 'owned_by', 'label': 'Owned by', 'reverse': 'owns'},
        {'value': 'created', 'label': 'Created', 'reverse': 'created_by'},
        {'value': 'created_by', 'label': 'Created by', 'reverse': 'created'},
        {'value': 'seeks', 'label': 'Seeks'},
        {'value': 'guards', 'label': 'Guards'},
    ],
    'plot': [
        {'value': 'involves', 'label': 'Involves'},
        {'value': 'involved_in', 'label': 'Involved in'},
        {'value': 'takes_place_in', 'label': 'Takes place in'},
        {'value': 'caused', 'label': 'Caused'},
        {'value': 'affected_by', 'label': 'Affected by'},
    ],
    'custom': [
        {'value': 'custom', 'label': 'Custom (specify label)'},
    ],
}

CUSTOM_TYPE = 'custom'

# node type → (metadata key, edge type) for references mirrored into node metadata
REFERENCE_FIELDS = {
    'place': ('parent_id', 'located_in'),
    'faction': ('headquarters_id', 'headquartered_in'),
}

# value → entry (with its category attached)
_BY_VALUE = {
    entry['value']: dict(entry, category=category)
    for category, entries in CATEGORIES.items()
    for entry in entries
}


def all_types():
    """Every catalog entry, flattened across categories, in display order."""
    return [dict(entry) for entry in _BY_VALUE.values()]


def get_type(value):
    """Return the catalog entry for value, or None if it isn't in the catalog."""
    return _BY_VALUE.get(value)


def humanize(value):
    """member_of → 'Member of'"""
    return value.replace('_', ' ').capitalize()


def label_for_type(value):
    """Default display label: the catalog label, or a humanized form of the key."""
    entry = _BY_VALUE.get(value)
    if entry:
        return entry['label']
    return humanize(value)


def reverse_type(value):
    """The type that describes the same relationship seen from the other end.

    Symmetric types are their own reverse, declared pairs swap, and anything
    else (unknown types, one-way types like member_of) falls back to itself.
    """
    entry = _BY_VALUE.get(value)
    if entry:
        if entry.get('bidirectional'):
            return value
        if entry.get('reverse'):
            return entry['reverse']
    return value
