import unittest
import numpy as np
import pandas as pd
import statsmodels.api as sm

from analysis.errors import InsufficientDataError, SchemaError
from analysis.component_selection import ComponentSelector, ComponentSelectionTable


class TestComponentSelector(unittest.TestCase):

    def setUp(self):
        np.random.seed(42)
        self.selector = ComponentSelector()
        # Orthonormal score columns
        self.U, _ = np.linalg.qr(np.random.normal(size=(60, 6)))

    def test_small_outcome(self):
        outcome = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        U, _, _ = np.linalg.svd(np.random.rand(5, 3), full_matrices=False)

        table = self.selector.select_cutoff(outcome, U, max_k=2)

        adj1 = sm.OLS(outcome, sm.add_constant(U[:, :1])).fit().rsquared_adj
        adj2 = sm.OLS(outcome, sm.add_constant(U[:, :2])).fit().rsquared_adj
        self.assertEqual(list(table.frame.index), [1, 2])
        self.assertTrue(np.isnan(table.frame.loc[1, 'gain']))
        self.assertAlmostEqual(table.frame.loc[2, 'gain'], adj2 - adj1)
        self.assertEqual(table.chosen_k, 2)

    def test_negative_gain_is_kept(self):
        # x2 is orthogonal to the constant, x1 and the noise, so adding it
        # leaves R2 unchanged and lowers adjusted R2
        x1 = np.array([-2.5, -1.5, -0.5, 0.5, 1.5, 2.5])
        noise = 0.1 * np.array([1, -1, 1, -1, 1, -1])
        x2 = np.array([1.0, -1.0, 0.0, 0.0, -1.0, 1.0])
        y = x1 + noise

        table = self.selector.select_cutoff(y, np.column_stack([x1, x2]))

        self.assertLess(table.frame.loc[2, 'gain'], 0)
        self.assertEqual(table.chosen_k, 2)

    def test_selects_largest_gain(self):
        y = 5.0 * self.U[:, 2] + 0.1 * self.U[:, 0] + np.random.normal(0, 0.01, 60)
        table = self.selector.select_cutoff(y, self.U)

        self.assertEqual(table.max_k, 6)
        self.assertEqual(table.chosen_k, 3)
        self.assertEqual(len(table.gains), 5)

    def test_largest_gain_differs_from_best_fit(self):
        frame = pd.DataFrame(
            {'adj_r2': [0.1, 0.6, 0.7], 'gain': [np.nan, 0.5, 0.1]},
            index=pd.Index([1, 2, 3], name='n_components')
        )
        table = ComponentSelectionTable(frame)
        self.assertEqual(table.chosen_k, 2)
        self.assertEqual(table.best_fit_k, 3)

    def test_ties_go_to_smallest_k(self):
        frame = pd.DataFrame(
            {'adj_r2': [0.0, 0.25, 0.5, 0.5], 'gain': [np.nan, 0.25, 0.25, 0.0]},
            index=pd.Index([1, 2, 3, 4], name='n_components')
        )
        self.assertEqual(ComponentSelectionTable(frame).chosen_k, 2)

    def test_deterministic(self):
        y = self.U[:, 1] + np.random.normal(0, 0.1, 60)
        first = self.selector.select_cutoff(y, self.U, 5)
        second = self.selector.select_cutoff(y, self.U, 5)
        pd.testing.assert_frame_equal(first.frame, second.frame)
        self.assertEqual(first.chosen_k, second.chosen_k)

    def test_max_k_above_available(self):
        U = np.random.normal(size=(100, 40))
        with self.assertRaises(InsufficientDataError):
            self.selector.select_cutoff(np.random.normal(size=100), U, max_k=50)

    def test_max_k_below_two(self):
        with self.assertRaises(InsufficientDataError):
            self.selector.select_cutoff(self.U[:, 0], self.U, max_k=1)

    def test_row_mismatch(self):
        with self.assertRaises(SchemaError):
            self.selector.select_cutoff(np.ones(10), self.U)

    def test_no_residual_degrees_of_freedom(self):
        U = np.random.normal(size=(4, 3))
        with self.assertRaises(InsufficientDataError) as ctx:
            self.selector.select_cutoff(np.random.normal(size=4), U)
        self.assertEqual(ctx.exception.component, 3)

    def test_rank_deficient_design(self):
        U = self.U.copy()
        U[:, 2] = U[:, 1]
        with self.assertRaises(InsufficientDataError) as ctx:
            self.selector.select_cutoff(np.random.normal(size=60), U, max_k=3)
        self.assertEqual(ctx.exception.component, 3)

    def test_report_frame(self):
        table = self.selector.select_cutoff(np.random.normal(size=60), self.U, 4)
        report = table.to_frame()
        self.assertEqual(list(report.columns), ['n_components', 'adj_r2', 'gain'])
        self.assertEqual(list(report['n_components']), [1, 2, 3, 4])
        self.assertIn('selected', table.summary())


if __name__ == '__main__':
    unittest.main()
