import unittest
from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from backup import clean_row, parse_backup, parse_csv_upload, transactions_to_csv


class CleanRowTests(unittest.TestCase):
    def test_rejects_unusable_rows(self):
        for row in ({'amount': 'x', 'type': 'debit', 'category': 'Food'},
                    {'amount': 0, 'type': 'debit', 'category': 'Food'},
                    {'amount': 5, 'type': 'refund', 'category': 'Food'},
                    {'amount': 5, 'type': 'debit', 'category': '  '},
                    ['not', 'a', 'dict']):
            self.assertIsNone(clean_row(row))

    def test_normalizes_fields(self):
        row = clean_row({'amount': '12.5', 'type': ' Credit ', 'category': ' Gift ',
                         'createdAt': '2024-05-01T10:00:00', 'note': '  '})
        self.assertEqual(row, {'amount': Decimal('12.5'), 'kind': 'credit', 'category': 'Gift',
                               'occurred_at': datetime(2024, 5, 1, 10), 'note': None})

    def test_falls_back_to_default_time(self):
        fallback = datetime(2024, 1, 1, 9)
        row = clean_row({'amount': 1, 'type': 'debit', 'category': 'A', 'createdAt': 'soon'}, default_time=fallback)
        self.assertEqual(row['occurred_at'], fallback)

    def test_amounts_out_of_column_range_are_skipped(self):
        for amount in ('1e30', '10000000000', '0.001', '0.004'):
            row = {'amount': amount, 'type': 'debit', 'category': 'Food'}
            self.assertIsNone(clean_row(row), amount)

    def test_amounts_are_rounded_to_cents(self):
        row = clean_row({'amount': '0.005', 'type': 'debit', 'category': 'Tiny'})
        self.assertEqual(str(row['amount']), '0.01')
        row = clean_row({'amount': '9999999999.99', 'type': 'credit', 'category': 'Max'})
        self.assertEqual(row['amount'], Decimal('9999999999.99'))


class CsvTests(unittest.TestCase):
    def test_missing_required_header(self):
        with self.assertRaises(ValueError):
            parse_csv_upload('amount,category\n5,Food\n')

    def test_upload_counts_skipped_rows(self):
        text = 'amount,type,category,date,note\n5,debit,Food,2024-05-01,lunch\nabc,debit,Food,,\n7,credit,,,\n'
        rows, skipped = parse_csv_upload(text)
        self.assertEqual(skipped, 2)
        self.assertEqual(rows[0]['occurred_at'], datetime(2024, 5, 1))
        self.assertEqual(rows[0]['note'], 'lunch')

    def test_export_quotes_and_flattens_notes(self):
        row = SimpleNamespace(id=3, amount=Decimal('4.5'), kind='debit', category='Food, drinks',
                              occurred_at=datetime(2024, 5, 1, 8), note='line one\nline two')
        text = transactions_to_csv([row])
        lines = text.split('\r\n')
        self.assertEqual(lines[0], 'id,amount,type,category,createdAt,note')
        self.assertEqual(lines[1], '3,4.50,debit,"Food, drinks",2024-05-01T08:00:00,line one line two')


class BackupDocumentTests(unittest.TestCase):
    def test_rejects_non_object(self):
        with self.assertRaises(ValueError):
            parse_backup(['transactions'])

    def test_filters_bad_entries(self):
        goal, budgets, transactions, avatar = parse_backup({
            'user': {'username': 'someone', 'avatar': 'data:image/png;base64,AAAA'},
            'savingGoal': {'monthlyGoal': '250'},
            'categoryBudgets': [{'category': 'Food', 'monthlyBudget': 100},
                                {'category': 'Rent', 'monthlyBudget': -5},
                                {'category': '', 'monthlyBudget': 10}],
            'transactions': [{'amount': 5, 'type': 'debit', 'category': 'Food', 'createdAt': '2024-05-01T08:00:00'},
                             {'amount': 'bad', 'type': 'debit', 'category': 'Food'}],
        })
        self.assertEqual(goal, Decimal('250'))
        self.assertEqual(budgets, [('Food', Decimal('100'))])
        self.assertEqual(len(transactions), 1)
        self.assertEqual(avatar, 'data:image/png;base64,AAAA')

    def test_missing_sections_are_empty(self):
        self.assertEqual(parse_backup({'transactions': 'nope'}), (None, [], [], None))

    def test_oversized_goal_and_budgets_are_dropped(self):
        goal, budgets, transactions, _ = parse_backup({
            'savingGoal': {'monthlyGoal': '1e30'},
            'categoryBudgets': [{'category': 'Food', 'monthlyBudget': '1e30'},
                                {'category': 'Rent', 'monthlyBudget': '0.001'}],
            'transactions': [{'amount': '1e30', 'type': 'debit', 'category': 'Food'}],
        })
        self.assertEqual((goal, budgets, transactions), (None, [], []))


if __name__ == '__main__':
    unittest.main()
