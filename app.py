import os
from datetime import datetime
from functools import wraps

from flask import Blueprint, Flask, current_app, g, jsonify, request
from itsdangerous import BadSignature, URLSafeTimedSerializer
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from werkzeug.security import check_password_hash

import store
from analytics.activity import compute_activity_stats
from analytics.charts import daily_debit_totals, daily_net_totals
from analytics.goals import compute_saving_goal_progress
from analytics.ledger import KINDS, snapshot
from analytics.money import format_money, parse_amount
from analytics.periods import ALL_TIME, MONTH
from analytics.ranges import DateRange, filter_transactions, parse_day, preset_range, range_summary
from analytics.summaries import (
    category_breakdown,
    compute_budget_statuses,
    compute_category_totals,
    compute_period_summaries,
    quick_categories,
    top_categories,
)
from backup import build_backup, clean_note, parse_backup, parse_csv_upload, transactions_to_csv
from config import Config, MAX_AMOUNT, MAX_AVATAR_LENGTH, MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from errors import ApiError, AuthError, NotFound, ValidationError
from ml.recommender import generate_recommendations, predict_next_month_debit
from models import db

api = Blueprint('api', __name__, url_prefix='/api')

GOAL_ERROR = f'Goal must be a number from 0 to {MAX_AMOUNT}.'


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    app.logger.setLevel(app.config['LOG_LEVEL'])
    db.init_app(app)
    with app.app_context():
        db.create_all()
    app.register_blueprint(api)
    register_error_handlers(app)
    return app


# ---------------------- Error Handlers ----------------------
def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err):
        db.session.rollback()
        app.logger.exception('Database error on %s %s', request.method, request.path)
        return jsonify({'error': 'Database error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({'error': err.description}), err.code


# ---------------------- Auth Helpers ----------------------
def _token_serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt='auth-token')


def issue_token(user):
    return _token_serializer().dumps({'sub': user.id})


def verify_token(token):
    try:
        payload = _token_serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])
    except BadSignature:  # also covers SignatureExpired
        return None
    return payload.get('sub') if isinstance(payload, dict) else None


def current_user():
    return g.get('user')


def login_required(view_func):
    @wraps(view_func)
    def wrapped(*args, **kwargs):
        scheme, _, token = request.headers.get('Authorization', '').partition(' ')
        if scheme != 'Bearer' or not token:
            raise AuthError('Missing or invalid Authorization header')
        user_id = verify_token(token)
        user = store.get_user(user_id) if user_id is not None else None
        if not user:
            raise AuthError('Invalid or expired token')
        g.user = user
        return view_func(*args, **kwargs)
    return wrapped


# ---------------------- Request Helpers ----------------------
def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def validate_transaction_payload(body):
    errors = []
    amount = None
    if body.get('amount') is None:
        errors.append('amount is required')
    else:
        amount = parse_amount(body['amount'])
        if amount is None:
            errors.append(f'amount must be a positive number up to {MAX_AMOUNT}')
    kind = body.get('type')
    if kind not in KINDS:
        errors.append('type must be "debit" or "credit"')
    category = body.get('category')
    if not isinstance(category, str) or not category.strip():
        errors.append('category is required and must be a string')
    if errors:
        raise ValidationError('Invalid transaction', errors=errors)
    return amount, kind, category.strip(), clean_note(body.get('note'))


def _requested_range(now):
    preset = request.args.get('preset')
    try:
        start_day = parse_day(request.args.get('from'))
        end_day = parse_day(request.args.get('to'))
        if preset:
            return preset_range(preset, now, start_day, end_day)
    except ValueError as e:
        raise ValidationError(str(e))
    return DateRange(start_day, end_day)


def _currency():
    return current_app.config['CURRENCY_SYMBOL']


# ---------------------- Routes: Auth ----------------------
@api.route('/health')
def health():
    return jsonify({'status': 'ok', 'message': 'Finance tracker backend is running'})


@api.route('/auth/register', methods=['POST'])
def register():
    body = _json_body()
    username = body.get('username')
    password = body.get('password')
    if not isinstance(username, str) or len(username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError(f'Username must be at least {MIN_USERNAME_LENGTH} characters.')
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    user = store.create_user(username.strip(), password)
    current_app.logger.info('Registered user %s', user.username)
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)}), 201


@api.route('/auth/login', methods=['POST'])
def login():
    body = _json_body()
    username = body.get('username')
    password = body.get('password')
    if not isinstance(username, str) or not username:
        raise ValidationError('Username is required.')
    if not isinstance(password, str) or not password:
        raise ValidationError('Password is required.')
    user = store.find_user_by_username(username.strip())
    if not user or not check_password_hash(user.password_hash, password):
        raise AuthError('Invalid username or password.')
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)})


@api.route('/auth/me')
@login_required
def me():
    return jsonify({'user': current_user().to_dict()})


@api.route('/user/avatar', methods=['PUT'])
@login_required
def update_avatar():
    avatar = _json_body().get('avatar')
    if avatar is not None:
        if not isinstance(avatar, str):
            raise ValidationError('avatar must be a string or null.')
        if len(avatar) > MAX_AVATAR_LENGTH:
            raise ValidationError('Avatar image is too large. Please use a smaller image.')
    return jsonify({'avatar': store.update_user_avatar(current_user(), avatar)})


# ---------------------- Routes: Saving Goal & Budgets ----------------------
@api.route('/saving-goal', methods=['GET'])
@login_required
def get_saving_goal():
    goal = store.get_saving_goal(current_user().id)
    return jsonify({'goal': format_money(goal) if goal is not None else None})


@api.route('/saving-goal', methods=['PUT'])
@login_required
def put_saving_goal():
    body = _json_body()
    if 'goal' not in body:
        raise ValidationError(GOAL_ERROR)
    goal = body['goal']
    if goal is not None:
        goal = parse_amount(goal, allow_zero=True)
        if goal is None:
            raise ValidationError(GOAL_ERROR)
    saved = store.set_saving_goal(current_user().id, goal)
    return jsonify({'goal': format_money(saved) if saved is not None else None})


@api.route('/category-budgets', methods=['GET'])
@login_required
def list_category_budgets():
    return jsonify([b.to_dict() for b in store.list_category_budgets(current_user().id)])


@api.route('/category-budgets', methods=['POST'])
@login_required
def save_category_budget():
    body = _json_body()
    category = body.get('category')
    if not isinstance(category, str):
        raise ValidationError('Category is required and must be a string.')
    category = category.strip()
    if not category:
        raise ValidationError('Category cannot be empty.')
    limit = parse_amount(body.get('monthlyBudget'))
    if limit is None:
        raise ValidationError(f'Monthly budget must be a positive number up to {MAX_AMOUNT}.')
    budget = store.upsert_category_budget(current_user().id, category, limit)
    return jsonify(budget.to_dict()), 201


@api.route('/category-budgets/<path:category>', methods=['DELETE'])
@login_required
def delete_category_budget(category):
    if not store.delete_category_budget(current_user().id, category.strip()):
        raise NotFound('Category budget not found')
    return jsonify({'success': True})


# ---------------------- Routes: Transactions ----------------------
@api.route('/transactions', methods=['GET'])
@login_required
def list_transactions():
    """The user's transactions newest first, optionally narrowed by type, category text and date range."""
    now = datetime.now()
    txs = store.list_transactions(current_user().id)
    try:
        rows = filter_transactions(
            txs,
            kind=request.args.get('type') or 'all',
            category_query=request.args.get('category', ''),
            date_range=_requested_range(now),
        )
    except ValueError as e:
        raise ValidationError(str(e))
    return jsonify([t.to_dict() for t in rows])


@api.route('/transactions', methods=['POST'])
@login_required
def create_transaction():
    amount, kind, category, note = validate_transaction_payload(_json_body())
    tx = store.create_transaction(current_user().id, amount, kind, category, note)
    return jsonify(tx.to_dict()), 201


@api.route('/transactions/<int:tx_id>', methods=['PUT'])
@login_required
def update_transaction(tx_id):
    amount, kind, category, note = validate_transaction_payload(_json_body())
    tx = store.update_transaction(current_user().id, tx_id, amount, kind, category, note)
    if not tx:
        raise NotFound('Transaction not found')
    return jsonify(tx.to_dict())


@api.route('/transactions/<int:tx_id>', methods=['DELETE'])
@login_required
def delete_transaction(tx_id):
    deleted = store.delete_transaction(current_user().id, tx_id)
    if not deleted:
        raise NotFound('Transaction not found')
    return jsonify({'success': True, 'deleted': deleted})


# ---------------------- Routes: Aggregates ----------------------
@api.route('/dashboard')
@login_required
def dashboard():
    """Every derived view, recomputed from the full ledger on each call."""
    user = current_user()
    now = datetime.now()
    currency = _currency()
    date_range = _requested_range(now)

    ledger = snapshot(store.list_transactions(user.id))
    summaries = compute_period_summaries(ledger, now)
    totals = compute_category_totals(ledger, now)
    budgets = compute_budget_statuses(store.list_category_budgets(user.id), totals, currency)
    goal = compute_saving_goal_progress(store.get_saving_goal(user.id), summaries[MONTH].net, currency)
    activity = compute_activity_stats(ledger, now)
    in_range = range_summary(ledger, date_range)

    return jsonify({
        'summaries': {('allTime' if kind == ALL_TIME else kind): s.to_dict() for kind, s in summaries.items()},
        'transactionCount': len(ledger),
        'categoryTotals': category_breakdown(totals),
        'topCategories': top_categories(totals),
        'quickCategories': quick_categories(totals),
        'budgets': [b.to_dict() for b in budgets],
        'savingGoal': goal.to_dict(),
        'activity': activity.to_dict(),
        'charts': {
            'dailyDebits': daily_debit_totals(ledger, now),
            'netTrend': daily_net_totals(ledger, now),
        },
        'range': date_range.to_dict(),
        'rangeSummary': in_range.to_dict() if in_range else None,
    })


@api.route('/insights')
@login_required
def insights():
    ledger = snapshot(store.list_transactions(current_user().id))
    return jsonify({
        'recommendations': generate_recommendations(ledger, _currency()),
        'nextMonthDebitPrediction': f'{predict_next_month_debit(ledger):.2f}',
    })


# ---------------------- Import / Export ----------------------
@api.route('/export/json')
@login_required
def export_json():
    user = current_user()
    return jsonify(build_backup(
        user,
        store.get_saving_goal(user.id),
        store.list_category_budgets(user.id),
        store.list_transactions(user.id),
    ))


@api.route('/import/json', methods=['POST'])
@login_required
def import_json():
    user = current_user()
    try:
        saving_goal, budgets, transactions, avatar = parse_backup(request.get_json(silent=True))
    except ValueError as e:
        raise ValidationError(str(e))
    if avatar is not None and len(avatar) > MAX_AVATAR_LENGTH:
        avatar = None
    store.replace_user_data(user, saving_goal, budgets, transactions, avatar)
    current_app.logger.info('Imported backup for user %s: %d transactions', user.username, len(transactions))
    return jsonify({'success': True, 'imported': {
        'transactions': len(transactions),
        'categoryBudgets': len(budgets),
        'savingGoal': bool(saving_goal),
    }})


@api.route('/transactions/export/csv')
@login_required
def export_csv():
    output = transactions_to_csv(store.list_transactions(current_user().id)).encode('utf-8')
    return (output, 200, {'Content-Type': 'text/csv; charset=utf-8', 'Content-Disposition': 'attachment; filename="transactions.csv"'})


@api.route('/transactions/import/csv', methods=['POST'])
@login_required
def import_csv():
    file = request.files.get('file')
    if not file:
        raise ValidationError('No file uploaded.')
    try:
        rows, skipped = parse_csv_upload(file.stream.read().decode('utf-8-sig'))
    except UnicodeDecodeError:
        raise ValidationError('CSV file must be UTF-8 encoded.')
    except ValueError as e:
        raise ValidationError(str(e))
    count = store.add_transactions(current_user().id, rows)
    return jsonify({'success': True, 'imported': count, 'skipped': skipped})


# ---------------------- Run App ----------------------
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), debug=True)
