"""Closed vocabularies for campaigns, nodes and sessions.

Each node type maps to the only subtypes it may carry, so a place can never
be saved as a 'villain'. Dict order is display order.
"""

NODE_SUBTYPES = {
    'character': {
        'pc': 'Player Character',
        'npc': 'NPC',
        'villain': 'Villain',
        'ally': 'Ally',
        'neutral': 'Neutral',
    },
    'place': {
        'world': 'World',
        'continent': 'Continent',
        'region': 'Region',
        'city': 'City',
        'town': 'Town',
        'village': 'Village',
        'dungeon': 'Dungeon',
        'building': 'Building',
        'landmark': 'Landmark',
    },
    'item': {
        'weapon': 'Weapon',
        'armor': 'Armor',
        'artifact': 'Artifact',
        'consumable': 'Consumable',
        'treasure': 'Treasure',
        'mundane': 'Mundane',
    },
    'faction': {
        'guild': 'Guild',
        'government': 'Government',
        'religious': 'Religious Order',
        'criminal': 'Criminal Organization',
        'military': 'Military',
        'arcane': 'Arcane Order',
    },
    'plot': {
        'main_quest': 'Main Quest',
        'side_quest': 'Side Quest',
        'character_arc': 'Character Arc',
        'mystery': 'Mystery',
        'conflict': 'Conflict',
    },
}

NODE_TYPES = list(NODE_SUBTYPES)

# URL segment → node type, e.g. /campaigns/<slug>/characters
COLLECTIONS = {f'{node_type}s': node_type for node_type in NODE_TYPES}

# Text fields each type's content payload is expected to carry.
# Extra keys are kept as-is; these ones must be strings when present.
CONTENT_FIELDS = {
    'character': ['appearance', 'personality', 'motivation', 'secrets', 'voice_notes'],
    'place': ['description', 'population', 'culture', 'history', 'points_of_interest', 'secrets'],
    'item': ['description', 'properties', 'history', 'secrets'],
    'faction': ['description', 'goals', 'methods', 'resources', 'history', 'secrets'],
    'plot': ['description', 'hooks', 'stakes', 'resolution', 'secrets'],
}

# Content keys that hold a nested mapping rather than text
CONTENT_MAPPINGS = {
    'character': ['stats'],
}

# Place subtypes that can contain other places (parent picker)
PLACE_CONTAINER_SUBTYPES = ['world', 'continent', 'region', 'city', 'town']

CONFIDENCE_LEVELS = {
    'canon': 'Canon (Established Fact)',
    'likely': 'Likely (Probable)',
    'rumor': 'Rumor (Unconfirmed)',
    'unknown': 'Unknown (Placeholder)',
}

CAMPAIGN_STATUSES = ['setup', 'active', 'paused', 'completed']

GENRES = {
    'high_fantasy': 'High Fantasy',
    'dark_fantasy': 'Dark Fantasy',
    'low_fantasy': 'Low Fantasy',
    'sword_and_sorcery': 'Sword & Sorcery',
    'grimdark': 'Grimdark',
    'comedic': 'Comedic',
    'political_intrigue': 'Political Intrigue',
    'horror': 'Horror',
    'mystery': 'Mystery',
    'exploration': 'Exploration',
    'other': 'Other',
}

RULE_SYSTEMS = {
    '5e': 'D&D 5th Edition',
    '5e_2024': 'D&D 5e (2024)',
    'pathfinder_2e': 'Pathfinder 2e',
    'pathfinder_1e': 'Pathfinder 1e',
    '3.5e': 'D&D 3.5 Edition',
    'osr': 'OSR / Old School',
    'homebrew': 'Homebrew System',
    'other': 'Other',
}

SESSION_STATUSES = {
    'planned': 'Planned',
    'in_progress': 'In Progress',
    'completed': 'Completed',
}

SESSION_PLAN_FIELDS = ['objectives', 'encounters', 'npcs', 'locations']
SESSION_OUTCOME_FIELDS = ['summary', 'decisions', 'consequences']


def pluralize(node_type):
    """character → characters. Every type in the vocabulary takes a plain 's'."""
    return f'{node_type}s'


def type_label(node_type):
    """Heading for a group of nodes, e.g. 'Characters'."""
    return pluralize(node_type).capitalize()
