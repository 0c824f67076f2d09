import unittest
import numpy as np
import pandas as pd

from analysis.errors import SchemaError, DegenerateColumnError
from analysis.entropy import EntropyTransformer
from synthetic import make_debate_frame


class TestEntropyTransformer(unittest.TestCase):

    def setUp(self):
        np.random.seed(42)
        self.transformer = EntropyTransformer()
        self.df = make_debate_frame(n_debates=5)
        self.columns = [c for c in self.df.columns if c.startswith('prop_')]

    def test_known_values(self):
        df = pd.DataFrame({'a': [10.0, 30.0], 'b': [50.0, 50.0]})
        result = self.transformer.transform(df, ['a', 'b'])

        w_a = -np.log(0.2)
        w_b = -np.log(0.5)
        self.assertAlmostEqual(result.weights['a'], w_a)
        self.assertAlmostEqual(result.weights['b'], w_b)
        np.testing.assert_allclose(result.values['a'].to_numpy(), [0.1 * w_a, 0.3 * w_a])
        np.testing.assert_allclose(result.values['b'].to_numpy(), [0.5 * w_b, 0.5 * w_b])

    def test_shape_index_and_column_order(self):
        result = self.transformer.transform(self.df, self.columns)
        self.assertEqual(result.shape, (len(self.df), len(self.columns)))
        self.assertEqual(result.columns, self.columns)
        self.assertTrue(result.values.index.equals(self.df.index))

    def test_scale_is_a_parameter(self):
        fractions = self.df[self.columns] / 100.0
        as_percent = self.transformer.transform(self.df, self.columns)
        as_fraction = EntropyTransformer(scale=1.0).transform(fractions, self.columns)
        np.testing.assert_allclose(as_percent.to_numpy(), as_fraction.to_numpy())

    def test_row_permutation_only_permutes_output(self):
        original = self.transformer.transform(self.df, self.columns)
        order = np.random.permutation(len(self.df))
        shuffled = self.transformer.transform(self.df.iloc[order], self.columns)

        np.testing.assert_allclose(shuffled.weights.to_numpy(), original.weights.to_numpy())
        np.testing.assert_allclose(shuffled.to_numpy(), original.to_numpy()[order])

    def test_zero_mean_column_is_reported(self):
        df = pd.DataFrame({
            'a': np.random.uniform(1, 10, 10),
            'b': np.random.uniform(1, 10, 10),
            'c': np.zeros(10)
        })

        with self.assertRaises(DegenerateColumnError) as ctx:
            self.transformer.transform(df, ['a', 'b', 'c'])
        self.assertEqual(ctx.exception.column, 'c')
        self.assertEqual(ctx.exception.columns, ['c'])

        self.assertEqual(self.transformer.degenerate_columns(df, ['a', 'b', 'c']), ['c'])
        result = self.transformer.transform(df, ['a', 'b'])
        self.assertEqual(result.shape, (10, 2))
        self.assertTrue(np.isfinite(result.to_numpy()).all())

    def test_full_column_gets_zero_weight(self):
        df = pd.DataFrame({'a': [100.0, 100.0, 100.0], 'b': [1.0, 2.0, 3.0]})
        result = self.transformer.transform(df, ['a', 'b'])
        self.assertEqual(result.weights['a'], 0.0)
        np.testing.assert_array_equal(result.values['a'].to_numpy(), np.zeros(3))

    def test_negative_values_rejected(self):
        df = self.df.copy()
        df.loc[0, 'prop_posemo'] = -1.0
        with self.assertRaises(SchemaError) as ctx:
            self.transformer.transform(df, self.columns)
        self.assertEqual(ctx.exception.column, 'prop_posemo')

    def test_missing_values_rejected(self):
        df = self.df.copy()
        df.loc[2, 'prop_social'] = np.nan
        with self.assertRaises(SchemaError) as ctx:
            self.transformer.transform(df, self.columns)
        self.assertEqual(ctx.exception.column, 'prop_social')

    def test_missing_and_non_numeric_columns_rejected(self):
        with self.assertRaises(SchemaError):
            self.transformer.transform(self.df, ['prop_absent'])
        with self.assertRaises(SchemaError):
            self.transformer.transform(self.df, ['group'])
        with self.assertRaises(SchemaError):
            self.transformer.transform(self.df, [])

    def test_apply_weights_to_held_out_rows(self):
        train = self.df.iloc[:12]
        test = self.df.iloc[12:]
        fitted = self.transformer.transform(train, self.columns)
        applied = self.transformer.apply_weights(test, fitted.weights)

        expected = (test[self.columns] / 100.0) * fitted.weights
        np.testing.assert_allclose(applied.to_numpy(), expected.to_numpy())
        self.assertTrue(applied.values.index.equals(test.index))

    def test_invalid_scale(self):
        with self.assertRaises(ValueError):
            EntropyTransformer(scale=0)


if __name__ == '__main__':
    unittest.main()
