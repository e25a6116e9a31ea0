import os
from decimal import Decimal

# ---------------------- Ledger constants ----------------------
UNCATEGORIZED_LABEL = 'Uncategorized'
DEFAULT_QUICK_CATEGORIES = ('Food', 'Groceries', 'Transport', 'Rent', 'Shopping', 'Bills', 'Others')
TOP_CATEGORY_COUNT = 3
QUICK_CATEGORY_COUNT = 6
ACTIVITY_WINDOW_DAYS = 30
DEBIT_CHART_DAYS = 7
NET_TREND_DAYS = 90

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
MAX_AVATAR_LENGTH = 300000
# largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal('9999999999.99')


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///finance.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE', 7 * 24 * 3600))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    CURRENCY_SYMBOL = os.environ.get('CURRENCY_SYMBOL', 'Rs')
