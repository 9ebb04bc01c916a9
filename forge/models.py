import uuid
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from forge import db
from forge.errors import NotFoundError

# Association table: Node ↔ Tag (many-to-many)
node_tags = db.Table('node_tags',
    db.Column('node_id', db.String(36), db.ForeignKey('nodes.id'), primary_key=True),
    db.Column('tag_id', db.Integer, db.ForeignKey('tags.id'), primary_key=True)
)


def _new_uuid():
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(256), unique=True, nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    campaigns = db.relationship('Campaign', backref='owner', lazy=True,
                                cascade='all, delete-orphan')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {'id': self.id, 'username': self.username, 'email': self.email}

    def __repr__(self):
        return f'<User {self.username}>'


class Campaign(db.Model):
    """A campaign and everything in it. Deleting it deletes its whole world."""
    __tablename__ = 'campaigns'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text)
    genre = db.Column(db.String(50))                          # dark_fantasy, high_fantasy, ...
    rule_system = db.Column(db.String(50), default='5e')      # 5e, pathfinder_2e, homebrew, ...
    tone_settings = db.Column(db.JSON)
    player_count = db.Column(db.Integer)
    status = db.Column(db.String(20), default='setup')        # setup / active / paused / completed
    settings = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    nodes = db.relationship('Node', backref='campaign', cascade='all, delete-orphan')
    edges = db.relationship('Edge', backref='campaign', cascade='all, delete-orphan')
    tags = db.relationship('Tag', backref='campaign', cascade='all, delete-orphan')
    sessions = db.relationship('GameSession', backref='campaign', cascade='all, delete-orphan',
                               order_by='GameSession.number')
    questionnaire_responses = db.relationship('QuestionnaireResponse', backref='campaign',
                                              cascade='all, delete-orphan')

    @staticmethod
    def get_owned(slug, user_id):
        """Look up a campaign by slug, but only if user_id owns it."""
        campaign = Campaign.query.filter_by(slug=slug, user_id=user_id).first()
        if campaign is None:
            raise NotFoundError('Campaign not found.')
        return campaign

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'description': self.description,
            'genre': self.genre,
            'rule_system': self.rule_system,
            'tone_settings': self.tone_settings,
            'player_count': self.player_count,
            'status': self.status,
            'settings': self.settings,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Campaign {self.name}>'


class Node(db.Model):
    """A world entity: character, place, item, faction or plot.

    Nodes are soft-deleted (deleted_at is set) so they can be restored from
    the trash. Always read through Node.live() unless you want tombstones.
    """
    __tablename__ = 'nodes'

    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    subtype = db.Column(db.String(50))
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False)
    summary = db.Column(db.Text)
    content = db.Column(db.JSON)
    # 'metadata' is reserved on declarative classes, so the attribute is renamed
    meta = db.Column('metadata', db.JSON)
    confidence = db.Column(db.String(20), default='canon')    # canon / likely / rumor / unknown
    is_secret = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    tags = db.relationship('Tag', secondary=node_tags, backref='nodes')

    __table_args__ = (
        db.UniqueConstraint('campaign_id', 'slug', name='uq_node_campaign_slug'),
        db.Index('ix_nodes_campaign_type', 'campaign_id', 'type'),
    )

    @classmethod
    def live(cls):
        """Query over nodes that have not been soft-deleted."""
        return cls.query.filter(cls.deleted_at.is_(None))

    def to_brief(self):
        """The minimal projection used wherever a node appears as an edge endpoint."""
        return {
            'id': self.id,
            'type': self.type,
            'subtype': self.subtype,
            'name': self.name,
            'slug': self.slug,
        }

    def to_dict(self):
        data = self.to_brief()
        data.update({
            'campaign_id': self.campaign_id,
            'summary': self.summary,
            'content': self.content or {},
            'metadata': self.meta or {},
            'confidence': self.confidence,
            'is_secret': bool(self.is_secret),
            'tags': [tag.to_dict() for tag in self.tags],
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
            'deleted_at': _iso(self.deleted_at),
        })
        return data

    def __repr__(self):
        return f'<Node {self.type}:{self.name}>'


class Edge(db.Model):
    """A directed, typed relationship between two nodes of the same campaign.

    The unique constraint over (campaign, source, target, type) is what
    actually prevents duplicates; the pre-check in forge.edges only gives a
    friendlier error.
    """
    __tablename__ = 'edges'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    source_node_id = db.Column(db.String(36), db.ForeignKey('nodes.id'), nullable=False, index=True)
    target_node_id = db.Column(db.String(36), db.ForeignKey('nodes.id'), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False)
    label = db.Column(db.String(100))
    strength = db.Column(db.Integer)                          # 1-10, optional
    meta = db.Column('metadata', db.JSON)
    is_secret = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    source_node = db.relationship(
        'Node', foreign_keys=[source_node_id],
        backref=db.backref('outgoing_edges', cascade='all, delete-orphan')
    )
    target_node = db.relationship(
        'Node', foreign_keys=[target_node_id],
        backref=db.backref('incoming_edges', cascade='all, delete-orphan')
    )

    __table_args__ = (
        db.UniqueConstraint('campaign_id', 'source_node_id', 'target_node_id', 'type',
                            name='uq_edge_campaign_source_target_type'),
        db.CheckConstraint('source_node_id <> target_node_id', name='ck_edge_no_self_loop'),
        db.Index('ix_edges_campaign_type', 'campaign_id', 'type'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'source_node_id': self.source_node_id,
            'target_node_id': self.target_node_id,
            'type': self.type,
            'label': self.label,
            'strength': self.strength,
            'metadata': self.meta or {},
            'is_secret': bool(self.is_secret),
            'source_node': self.source_node.to_brief() if self.source_node else None,
            'target_node': self.target_node.to_brief() if self.target_node else None,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Edge {self.source_node_id} -{self.type}-> {self.target_node_id}>'


class Tag(db.Model):
    __tablename__ = 'tags'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(7), default='#6b7280')

    # Tag names are unique within a campaign
    __table_args__ = (db.UniqueConstraint('campaign_id', 'name', name='uq_tag_campaign_name'),)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'color': self.color}

    def __repr__(self):
        return f'<Tag {self.name}>'


class GameSession(db.Model):
    """One play session. Numbers are unique per campaign; 0 is session zero."""
    __tablename__ = 'game_sessions'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    number = db.Column(db.Integer, nullable=False, default=0)
    title = db.Column(db.String(255))
    status = db.Column(db.String(20), default='planned')      # planned / in_progress / completed
    planned_date = db.Column(db.Date)
    actual_date = db.Column(db.Date)
    plan = db.Column(db.JSON)          # objectives, encounters, npcs, locations
    notes = db.Column(db.Text)         # GM notes
    recap = db.Column(db.Text)         # "previously on..."
    outcomes = db.Column(db.JSON)      # summary, decisions, consequences
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('campaign_id', 'number', name='uq_session_campaign_number'),)

    @property
    def is_session_zero(self):
        return self.number == 0

    @property
    def display_name(self):
        return self.title or f'Session {self.number}'

    def to_dict(self):
        return {
            'id': self.id,
            'campaign_id': self.campaign_id,
            'number': self.number,
            'title': self.title,
            'status': self.status,
            'planned_date': _iso(self.planned_date),
            'actual_date': _iso(self.actual_date),
            'plan': self.plan or {},
            'notes': self.notes,
            'recap': self.recap,
            'outcomes': self.outcomes or {},
            'is_session_zero': self.is_session_zero,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<GameSession {self.number}: {self.title}>'


class QuestionnaireResponse(db.Model):
    """One answer to a setup or session-planning question. Upserted by key."""
    __tablename__ = 'questionnaire_responses'

    id = db.Column(db.Integer, primary_key=True)
    campaign_id = db.Column(db.Integer, db.ForeignKey('campaigns.id'), nullable=False)
    game_session_id = db.Column(db.Integer, db.ForeignKey('game_sessions.id'), nullable=True)
    type = db.Column(db.String(50), nullable=False)           # campaign_setup / session_planning
    question_key = db.Column(db.String(100), nullable=False)
    response = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    game_session = db.relationship(
        'GameSession',
        backref=db.backref('questionnaire_responses', cascade='all, delete-orphan')
    )

    __table_args__ = (
        db.UniqueConstraint('campaign_id', 'type', 'question_key',
                            name='uq_questionnaire_campaign_type_key'),
    )

    def __repr__(self):
        return f'<QuestionnaireResponse {self.type}:{self.question_key}>'


def get_or_create_tags(campaign_id, tag_string):
    """Parse a comma-separated tag string and return a list of Tag objects.
    Creates new Tag records as needed. Tags are stored lowercase and trimmed."""
    names = []
    for raw in tag_string.split(','):
        name = raw.strip().lower()
        if name and name not in names:
            names.append(name)
    tags = []
    for name in names:
        tag = Tag.query.filter_by(name=name, campaign_id=campaign_id).first()
        if not tag:
            tag = Tag(name=name, campaign_id=campaign_id)
            db.session.add(tag)
        tags.append(tag)
    return tags
