from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

Money = db.Numeric(12, 2, asdecimal=True)


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)
    avatar = db.Column(db.Text, nullable=True)
    transactions = db.relationship('Transaction', backref='user', lazy=True, cascade="all, delete-orphan")
    budgets = db.relationship('CategoryBudget', backref='user', lazy=True, cascade="all, delete-orphan")
    saving_goal = db.relationship('SavingGoal', backref='user', uselist=False, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'avatar': self.avatar or None,
        }


class Transaction(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    amount = db.Column(Money, nullable=False)  # always positive
    kind = db.Column(db.String(10), nullable=False)  # 'debit' or 'credit'
    category = db.Column(db.String(100), nullable=False)
    occurred_at = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)
    note = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': f'{self.amount:.2f}',
            'type': self.kind,
            'category': self.category,
            'createdAt': self.occurred_at.isoformat(),
            'note': self.note,
        }


class CategoryBudget(db.Model):
    __table_args__ = (db.UniqueConstraint('user_id', 'category'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=False)
    monthly_limit = db.Column(Money, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_dict(self):
        return {'category': self.category, 'monthlyBudget': f'{self.monthly_limit:.2f}'}


class SavingGoal(db.Model):
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), primary_key=True)
    monthly_target = db.Column(Money, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)
