"""Campaign setup questionnaire.

The GM answers a fixed list of questions one at a time (each answer is
upserted, so re-answering overwrites), then completes setup, which copies
the answers that map onto campaign columns and marks the campaign active.
"""

from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from forge import db
from forge import validation as v
from forge.errors import ValidationError
from forge.models import Campaign, QuestionnaireResponse

setup_bp = Blueprint('setup', __name__, url_prefix='/campaigns/<slug>/setup')

SETUP_TYPE = 'campaign_setup'

# ── Question set ───────────────────────────────────────────────────────
# Order here is the order the wizard asks them in.

SETUP_QUESTIONS = [
    {
        'key': 'genre',
        'title': 'Campaign Genre',
        'description': 'What tone and genre best describes your campaign?',
        'type': 'single_select',
        'options': [
            {'value': 'high_fantasy', 'label': 'High Fantasy', 'description': 'Epic quests, powerful magic, world-changing events'},
            {'value': 'dark_fantasy', 'label': 'Dark Fantasy', 'description': 'Gritty, morally grey, dangerous world'},
            {'value': 'heroic_fantasy', 'label': 'Heroic Fantasy', 'description': 'Classic heroes vs villains, good triumphs'},
            {'value': 'sword_sorcery', 'label': 'Sword & Sorcery', 'description': 'Personal stakes, low magic, mortal concerns'},
            {'value': 'comedic', 'label': 'Comedic', 'description': 'Light-hearted, jokes, absurdist situations'},
            {'value': 'mystery', 'label': 'Mystery', 'description': 'Investigation, clues, unraveling secrets'},
            {'value': 'horror', 'label': 'Horror', 'description': 'Fear, dread, survival against the unknown'},
            {'value': 'political', 'label': 'Political Intrigue', 'description': 'Court drama, factions, scheming'},
        ],
    },
    {
        'key': 'player_count',
        'title': 'Number of Players',
        'description': 'How many players are in your group?',
        'type': 'number',
        'min': 1,
        'max': 10,
        'default': 4,
    },
    {
        'key': 'player_experience',
        'title': 'Player Experience',
        'description': 'How experienced is your group with TTRPGs?',
        'type': 'single_select',
        'options': [
            {'value': 'beginner', 'label': 'New Players', 'description': 'First campaign or still learning the rules'},
            {'value': 'intermediate', 'label': 'Some Experience', 'description': 'Comfortable with basics, still growing'},
            {'value': 'experienced', 'label': 'Experienced', 'description': 'Multiple campaigns, know the system well'},
            {'value': 'veteran', 'label': 'Veterans', 'description': 'Years of play, deep system mastery'},
            {'value': 'mixed', 'label': 'Mixed Group', 'description': 'Combination of experience levels'},
        ],
    },
    {
        'key': 'campaign_length',
        'title': 'Campaign Length',
        'description': 'How long do you expect this campaign to run?',
        'type': 'single_select',
        'options': [
            {'value': 'oneshot', 'label': 'One-Shot', 'description': 'Single session adventure'},
            {'value': 'short', 'label': 'Short (1-3 months)', 'description': '4-12 sessions'},
            {'value': 'medium', 'label': 'Medium (3-6 months)', 'description': '12-24 sessions'},
            {'value': 'long', 'label': 'Long (6+ months)', 'description': '24+ sessions, open-ended'},
        ],
    },
    {
        'key': 'world_type',
        'title': 'Campaign World',
        'description': 'What world will your campaign take place in?',
        'type': 'single_select',
        'options': [
            {'value': 'homebrew', 'label': 'Homebrew World', 'description': 'Your own original creation'},
            {'value': 'forgotten_realms', 'label': 'Forgotten Realms', 'description': 'Official D&D setting (Faerûn)'},
            {'value': 'eberron', 'label': 'Eberron', 'description': 'Magitech noir setting'},
            {'value': 'ravenloft', 'label': 'Ravenloft', 'description': 'Gothic horror domains'},
            {'value': 'greyhawk', 'label': 'Greyhawk', 'description': 'Classic high fantasy'},
            {'value': 'other_official', 'label': 'Other Official Setting', 'description': 'Different published setting'},
            {'value': 'hybrid', 'label': 'Hybrid', 'description': 'Mix of homebrew and official content'},
        ],
    },
    {
        'key': 'session_length',
        'title': 'Typical Session Length',
        'description': 'How long are your typical play sessions?',
        'type': 'single_select',
        'options': [
            {'value': '2h', 'label': '2 hours', 'description': 'Short sessions'},
            {'value': '3h', 'label': '3 hours', 'description': 'Standard online sessions'},
            {'value': '4h', 'label': '4 hours', 'description': 'Standard in-person sessions'},
            {'value': '5h+', 'label': '5+ hours', 'description': 'Extended play sessions'},
        ],
    },
    {
        'key': 'play_style',
        'title': 'Play Style Balance',
        'description': 'What balance of play styles does your group prefer?',
        'type': 'multi_select',
        'max_selections': 3,
        'options': [
            {'value': 'combat', 'label': 'Combat', 'description': 'Tactical battles and encounters'},
            {'value': 'roleplay', 'label': 'Roleplay', 'description': 'Character interactions and drama'},
            {'value': 'exploration', 'label': 'Exploration', 'description': 'Discovering the world'},
            {'value': 'puzzles', 'label': 'Puzzles', 'description': 'Problem-solving challenges'},
            {'value': 'social', 'label': 'Social', 'description': 'NPC relationships and politics'},
            {'value': 'sandbox', 'label': 'Sandbox', 'description': 'Player-driven narrative'},
        ],
    },
    {
        'key': 'safety_tools',
        'title': 'Safety Tools',
        'description': 'Which safety tools will you use in your game?',
        'type': 'multi_select',
        'options': [
            {'value': 'lines_veils', 'label': 'Lines & Veils', 'description': 'Hard limits and fade-to-black topics'},
            {'value': 'x_card', 'label': 'X-Card', 'description': 'Stop and skip uncomfortable content'},
            {'value': 'open_door', 'label': 'Open Door', 'description': 'Anyone can leave, no questions asked'},
            {'value': 'checkins', 'label': 'Regular Check-ins', 'description': 'Periodic consent verification'},
            {'value': 'stars_wishes', 'label': 'Stars & Wishes', 'description': 'End-of-session feedback'},
            {'value': 'none', 'label': 'None specified', 'description': 'Will discuss later'},
        ],
    },
    {
        'key': 'inspirations',
        'title': 'Inspirations',
        'description': 'What books, movies, games, or other media inspire your campaign? (Optional)',
        'type': 'text',
        'placeholder': 'e.g., Lord of the Rings, Game of Thrones, The Witcher...',
    },
    {
        'key': 'campaign_summary',
        'title': 'Campaign Pitch',
        'description': 'Write a brief pitch for your campaign - the elevator speech you would give to players. (Optional)',
        'type': 'textarea',
        'placeholder': 'In a world where... your heroes must...',
    },
]

QUESTIONS_BY_KEY = {q['key']: q for q in SETUP_QUESTIONS}

# Not asked by the wizard, but stored the same way by clients that set it
TONE_SETTINGS_KEY = 'tone_settings'


def check_answer(question_key, response):
    """Return an error message if response doesn't fit the question, else None."""
    if question_key == TONE_SETTINGS_KEY:
        return None if isinstance(response, dict) else 'Tone settings must be an object.'

    question = QUESTIONS_BY_KEY[question_key]
    kind = question['type']
    allowed = [o['value'] for o in question.get('options', [])]

    if kind == 'single_select' and response not in allowed:
        return f'Choose one of: {", ".join(allowed)}.'
    if kind == 'multi_select':
        if not isinstance(response, list) or any(r not in allowed for r in response):
            return f'Choose any of: {", ".join(allowed)}.'
        limit = question.get('max_selections')
        if limit and len(response) > limit:
            return f'Choose at most {limit}.'
    if kind == 'number':
        errors = {}
        v.integer({'response': response}, 'response', errors,
                  min_value=question['min'], max_value=question['max'])
        return errors.get('response')
    if kind in ('text', 'textarea') and not isinstance(response, str):
        return 'The response must be text.'
    return None


def _answers(campaign):
    responses = QuestionnaireResponse.query.filter_by(campaign_id=campaign.id, type=SETUP_TYPE).all()
    return {r.question_key: r.response for r in responses}


@setup_bp.route('', methods=['GET'])
@login_required
def show_setup(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    return jsonify({
        'campaign': campaign.to_dict(),
        'questions': SETUP_QUESTIONS,
        'responses': _answers(campaign),
    })


@setup_bp.route('', methods=['POST'])
@login_required
def save_answer(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    data = v.json_body()

    errors = {}
    key = v.string(data, 'question_key', errors, required=True)
    if key and key not in QUESTIONS_BY_KEY and key != TONE_SETTINGS_KEY:
        errors['question_key'] = 'Unknown question.'
    if data.get('response') is None:
        errors['response'] = 'The response field is required.'
    elif 'question_key' not in errors:
        problem = check_answer(key, data['response'])
        if problem:
            errors['response'] = problem
    if errors:
        raise ValidationError(errors)

    answer = QuestionnaireResponse.query.filter_by(
        campaign_id=campaign.id, type=SETUP_TYPE, question_key=key).first()
    if answer is None:
        answer = QuestionnaireResponse(campaign_id=campaign.id, type=SETUP_TYPE, question_key=key)
        db.session.add(answer)
    answer.response = data['response']
    db.session.commit()

    return jsonify({'question_key': key, 'response': answer.response, 'message': 'Answer saved.'})


@setup_bp.route('/complete', methods=['POST'])
@login_required
def complete_setup(slug):
    campaign = Campaign.get_owned(slug, current_user.id)
    answers = _answers(campaign)

    if answers.get('genre') is not None:
        campaign.genre = answers['genre']
    if answers.get('player_count') is not None:
        campaign.player_count = int(answers['player_count'])
    if answers.get(TONE_SETTINGS_KEY) is not None:
        campaign.tone_settings = answers[TONE_SETTINGS_KEY]
    campaign.status = 'active'
    db.session.commit()

    current_app.logger.info(f'Campaign {campaign.id} setup completed')
    return jsonify({
        'campaign': campaign.to_dict(),
        'message': 'Campaign setup complete! You can now start building your world.',
    })
