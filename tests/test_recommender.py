import unittest
from datetime import datetime

from helpers import tx
from ml.recommender import generate_recommendations, predict_next_month_debit


class RecommenderTests(unittest.TestCase):
    def test_empty_ledger_asks_for_more_data(self):
        self.assertEqual(len(generate_recommendations([])), 1)
        self.assertEqual(predict_next_month_debit([]), 0.0)

    def test_single_month_prediction_is_that_month(self):
        ledger = [tx(40, 'debit', 'Food', datetime(2024, 3, 2)), tx(2.5, 'debit', 'Food', datetime(2024, 3, 9))]
        self.assertEqual(predict_next_month_debit(ledger), 42.5)

    def test_linear_trend(self):
        ledger = [tx(amount, 'debit', 'Rent', datetime(2024, month, 5))
                  for month, amount in ((1, 100), (2, 200), (3, 300))]
        self.assertAlmostEqual(predict_next_month_debit(ledger), 400.0, places=2)

    def test_prediction_never_negative(self):
        ledger = [tx(amount, 'debit', 'Rent', datetime(2024, month, 5))
                  for month, amount in ((1, 900), (2, 300), (3, 10))]
        self.assertEqual(predict_next_month_debit(ledger), 0.0)

    def test_messages(self):
        ledger = [
            tx(1000, 'credit', 'Salary', datetime(2024, 1, 1)),
            tx(300, 'debit', 'Food', datetime(2024, 1, 10)),
            tx(100, 'debit', 'Bus', datetime(2024, 2, 10)),
        ]
        recs = generate_recommendations(ledger, currency='$')
        self.assertIn('60.0%', recs[0])
        self.assertTrue(recs[1].startswith('High spend in "Food" category: $ 300'))
        self.assertTrue(recs[-1].startswith('Predicted next month debits: $ '))

    def test_spike_is_reported(self):
        ledger = [tx(100, 'debit', 'Food', datetime(2024, 1, 3)), tx(500, 'debit', 'Food', datetime(2024, 2, 3))]
        recs = generate_recommendations(ledger)
        self.assertTrue(any('exceeded your previous average' in r for r in recs))
        self.assertIn('Add credit entries to compute your savings rate.', recs)


if __name__ == '__main__':
    unittest.main()
