"""
Ledger store: row-level CRUD for users, transactions, budgets and saving goals.

Every query is scoped by user id.  Callers hand in already-validated values;
the aggregation engine only ever sees the lists returned from here.
"""
from datetime import datetime

from sqlalchemy import func
from werkzeug.security import generate_password_hash

from models import db, User, Transaction, CategoryBudget, SavingGoal
from errors import ValidationError


# ---------------------- Users ----------------------
def get_user(user_id):
    return db.session.get(User, user_id)


def find_user_by_username(username):
    return User.query.filter_by(username=username).first()


def create_user(username, password):
    if find_user_by_username(username):
        raise ValidationError('Username already taken.')
    user = User(username=username, password_hash=generate_password_hash(password))
    db.session.add(user)
    db.session.commit()
    return user


def update_user_avatar(user, avatar):
    user.avatar = avatar or None
    db.session.commit()
    return user.avatar


# ---------------------- Transactions ----------------------
def list_transactions(user_id):
    return Transaction.query.filter_by(user_id=user_id).order_by(Transaction.occurred_at.asc(), Transaction.id.asc()).all()


def get_transaction(user_id, tx_id):
    return Transaction.query.filter_by(id=tx_id, user_id=user_id).first()


def create_transaction(user_id, amount, kind, category, note=None, occurred_at=None):
    tx = Transaction(user_id=user_id, amount=amount, kind=kind, category=category, note=note,
                     occurred_at=occurred_at or datetime.now())
    db.session.add(tx)
    db.session.commit()
    return tx


def add_transactions(user_id, rows):
    """Append several cleaned rows in one commit; returns how many were added."""
    for row in rows:
        db.session.add(Transaction(user_id=user_id, **row))
    db.session.commit()
    return len(rows)


def update_transaction(user_id, tx_id, amount, kind, category, note):
    """Full replace of the editable fields; ``occurred_at`` is kept. None if not found."""
    tx = get_transaction(user_id, tx_id)
    if not tx:
        return None
    tx.amount = amount
    tx.kind = kind
    tx.category = category
    tx.note = note
    db.session.commit()
    return tx


def delete_transaction(user_id, tx_id):
    tx = get_transaction(user_id, tx_id)
    if not tx:
        return None
    deleted = tx.to_dict()
    db.session.delete(tx)
    db.session.commit()
    return deleted


# ---------------------- Category budgets ----------------------
def list_category_budgets(user_id):
    return CategoryBudget.query.filter_by(user_id=user_id).order_by(func.lower(CategoryBudget.category)).all()


def find_category_budget(user_id, category):
    return CategoryBudget.query.filter(
        CategoryBudget.user_id == user_id,
        func.lower(CategoryBudget.category) == category.lower(),
    ).first()


def upsert_category_budget(user_id, category, monthly_limit):
    budget = find_category_budget(user_id, category)
    if budget:
        budget.monthly_limit = monthly_limit
    else:
        budget = CategoryBudget(user_id=user_id, category=category, monthly_limit=monthly_limit)
        db.session.add(budget)
    db.session.commit()
    return budget


def delete_category_budget(user_id, category):
    budget = find_category_budget(user_id, category)
    if not budget:
        return False
    db.session.delete(budget)
    db.session.commit()
    return True


# ---------------------- Saving goal ----------------------
def get_saving_goal(user_id):
    goal = db.session.get(SavingGoal, user_id)
    return goal.monthly_target if goal else None


def set_saving_goal(user_id, target):
    """Store the monthly target; None or zero clears it."""
    goal = db.session.get(SavingGoal, user_id)
    if target is None or target == 0:
        if goal:
            db.session.delete(goal)
        target = None
    elif goal:
        goal.monthly_target = target
    else:
        db.session.add(SavingGoal(user_id=user_id, monthly_target=target))
    db.session.commit()
    return target


# ---------------------- Backup import ----------------------
def replace_user_data(user, saving_goal, budgets, transactions, avatar=None):
    """Swap all of a user's ledger data for the given cleaned backup contents in one commit."""
    try:
        Transaction.query.filter_by(user_id=user.id).delete()
        CategoryBudget.query.filter_by(user_id=user.id).delete()
        SavingGoal.query.filter_by(user_id=user.id).delete()
        db.session.flush()

        if avatar is not None:
            user.avatar = avatar or None
        if saving_goal:
            db.session.add(SavingGoal(user_id=user.id, monthly_target=saving_goal))
        seen = {}
        for category, monthly_limit in budgets:
            existing = seen.get(category.lower())
            if existing:
                existing.monthly_limit = monthly_limit
                continue
            budget = CategoryBudget(user_id=user.id, category=category, monthly_limit=monthly_limit)
            seen[category.lower()] = budget
            db.session.add(budget)
        for row in transactions:
            db.session.add(Transaction(user_id=user.id, **row))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
