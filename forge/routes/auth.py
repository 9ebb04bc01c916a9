from flask import Blueprint, jsonify, session, current_app
from flask_login import login_user, logout_user, current_user, login_required
from forge import db, limiter
from forge import validation as v
from forge.errors import AuthError, ValidationError
from forge.models import User

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    data = v.json_body()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        current_app.logger.warning(f'Failed login for "{username}"')
        raise AuthError('Invalid username or password.')

    login_user(user, remember=bool(data.get('remember')))
    return jsonify({'user': user.to_dict(), 'message': 'Logged in.'})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    session.clear()
    return jsonify({'message': 'You have been logged out.'})


@auth_bp.route('/signup', methods=['POST'])
@limiter.limit("5 per minute", methods=["POST"])
def signup():
    data = v.json_body()
    errors = {}
    username = v.string(data, 'username', errors, required=True, max_length=80)
    email = v.string(data, 'email', errors, max_length=256)
    password = data.get('password') or ''

    if username and len(username) < 3:
        errors['username'] = 'Username must be at least 3 characters.'
    if len(password) < 8:
        errors['password'] = 'Password must be at least 8 characters.'
    elif password != data.get('confirm_password', password):
        errors['confirm_password'] = 'Passwords do not match.'
    if username and User.query.filter_by(username=username).first():
        errors['username'] = 'That username is already taken.'
    if email and User.query.filter_by(email=email).first():
        errors['email'] = 'That email is already registered.'
    if errors:
        raise ValidationError(errors)

    user = User(username=username, email=email)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f'User {user.id} signed up: {username}')

    login_user(user)
    return jsonify({'user': user.to_dict(), 'message': f'Welcome, {username}! Your account has been created.'}), 201


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
