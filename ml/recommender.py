import pandas as pd
from sklearn.linear_model import LinearRegression

from analytics.ledger import snapshot
from config import TOP_CATEGORY_COUNT, UNCATEGORIZED_LABEL

SAVINGS_RATE_TARGET = 0.2
SPIKE_FACTOR = 1.2


def _ledger_df(transactions):
    # Build a DataFrame from the ledger snapshot; undated rows cannot be placed in a month
    rows = [{
        'date': e.occurred_at,
        'amount': float(e.amount),
        'kind': e.kind,
        'category': e.category or UNCATEGORIZED_LABEL,
    } for e in snapshot(transactions) if e.occurred_at is not None]
    if not rows:
        return pd.DataFrame(columns=['date', 'amount', 'kind', 'category'])
    df = pd.DataFrame(rows)
    df['date'] = pd.to_datetime(df['date'])
    return df


def _monthly_debits(df):
    debits = df[df['kind'] == 'debit'].copy()
    if debits.empty:
        return pd.Series(dtype=float)
    debits['ym'] = debits['date'].dt.to_period('M').astype(str)
    return debits.groupby('ym')['amount'].sum().sort_index()


def predict_next_month_debit(transactions):
    monthly = _monthly_debits(_ledger_df(transactions))
    if monthly.empty:
        return 0.0
    if len(monthly) < 2:
        # Not enough data to fit
        return round(float(monthly.iloc[-1]), 2)
    m = monthly.reset_index()
    # Turn months into an integer index
    m['idx'] = range(1, len(m) + 1)
    X = m[['idx']].values
    y = m['amount'].values
    model = LinearRegression().fit(X, y)
    next_idx = m['idx'].max() + 1
    pred = float(model.predict([[next_idx]])[0])
    return round(max(pred, 0.0), 2)


def generate_recommendations(transactions, currency='Rs'):
    df = _ledger_df(transactions)
    recs = []
    if df.empty:
        recs.append('Add at least 2 months of transactions to get personalized savings insights.')
        return recs
    total_credit = df[df['kind'] == 'credit']['amount'].sum()
    total_debit = df[df['kind'] == 'debit']['amount'].sum()
    if total_credit > 0:
        savings_rate = max((total_credit - total_debit) / total_credit, 0)
        recs.append(f'Your overall savings rate is {savings_rate*100:.1f}%. Aim for {SAVINGS_RATE_TARGET*100:.0f}%+ as a baseline.')
    else:
        recs.append('Add credit entries to compute your savings rate.')
    # Category suggestions (top spend categories)
    cat = df[df['kind'] == 'debit'].groupby('category')['amount'].sum().sort_values(ascending=False, kind='stable')
    for c, v in cat.head(TOP_CATEGORY_COUNT).items():
        recs.append(f'High spend in "{c}" category: {currency} {v:.0f}. Consider setting a monthly budget or finding cheaper alternatives.')
    # Volatility check: latest month against the average of the earlier ones
    monthly = _monthly_debits(df)
    if len(monthly) >= 2:
        last = monthly.iloc[-1]
        prev_avg = monthly.iloc[:-1].mean()
        if last > SPIKE_FACTOR * prev_avg:
            recs.append("Your latest month's debits exceeded your previous average by 20%+. Review discretionary categories.")
    pred = predict_next_month_debit(transactions)
    if total_credit > 0:
        target_save = max(total_credit * SAVINGS_RATE_TARGET, 0)
        recs.append(f'Predicted next month debits: {currency} {pred:.0f}. Set a saving goal of at least {currency} {target_save:.0f}.')
    else:
        recs.append(f'Predicted next month debits: {currency} {pred:.0f}. Add credits to compute a saving goal.')
    return recs
