import unittest
import numpy as np
import pandas as pd

from analysis.errors import InsufficientDataError
from analysis.interpretation import ComponentInterpreter, default_labels


class TestComponentInterpreter(unittest.TestCase):

    def setUp(self):
        self.loadings = pd.DataFrame(
            {
                'C1': [0.6, -0.2, 0.1, -0.7],
                'C2': [0.0, 0.5, -0.5, 0.3],
            },
            index=['prop_posemo', 'prop_negemo', 'prop_health', 'prop_money']
        )
        self.interpreter = ComponentInterpreter(labels=default_labels(self.loadings.index))

    def test_top_and_bottom_order(self):
        profile = self.interpreter.profile(self.loadings, 1, 2)
        self.assertEqual([f.feature for f in profile.top], ['prop_posemo', 'prop_health'])
        self.assertEqual([f.feature for f in profile.bottom], ['prop_money', 'prop_negemo'])
        self.assertEqual(profile.name, 'C1')
        self.assertEqual(profile.overlap(), [])

    def test_overlap_allowed_when_features_are_few(self):
        profile = self.interpreter.profile(self.loadings, 1, 3)
        self.assertEqual(len(profile.top), 3)
        self.assertEqual(len(profile.bottom), 3)
        self.assertGreaterEqual(len(profile.overlap()), 2)

    def test_labels_and_fallback(self):
        profile = self.interpreter.profile(self.loadings, 2, 1, labels={'prop_negemo': 'Negative emotion'})
        self.assertEqual(profile.top[0].label, 'Negative emotion')
        self.assertEqual(profile.bottom[0].label, 'health')

        bare = ComponentInterpreter().profile(self.loadings, 2, 1)
        self.assertEqual(bare.top[0].label, 'prop_negemo')

    def test_equal_loadings_keep_table_order(self):
        loadings = pd.DataFrame({'C1': [0.5, 0.5, 0.5]}, index=['a', 'b', 'c'])
        profile = ComponentInterpreter().profile(loadings, 1, 2)
        self.assertEqual([f.feature for f in profile.top], ['a', 'b'])
        self.assertEqual([f.feature for f in profile.bottom], ['a', 'b'])

    def test_invalid_requests(self):
        with self.assertRaises(InsufficientDataError):
            self.interpreter.profile(self.loadings, 3, 2)
        with self.assertRaises(InsufficientDataError):
            self.interpreter.profile(self.loadings, 0, 2)
        with self.assertRaises(InsufficientDataError):
            self.interpreter.profile(self.loadings, 1, 5)
        with self.assertRaises(InsufficientDataError):
            self.interpreter.profile(self.loadings, 1, 0)

    def test_profile_all_and_frame(self):
        profiles = self.interpreter.profile_all(self.loadings, 2)
        self.assertEqual([p.component for p in profiles], [1, 2])

        frame = profiles[0].to_frame()
        self.assertEqual(len(frame), 4)
        self.assertEqual(list(frame['side']), ['top', 'top', 'bottom', 'bottom'])
        np.testing.assert_allclose(frame['loading'].to_numpy(), [0.6, 0.1, -0.7, -0.2])
        self.assertIn('posemo', profiles[0].describe())

    def test_default_labels(self):
        labels = default_labels(['prop_health', 'prop.we', 'other'])
        self.assertEqual(labels, {'prop_health': 'health', 'prop.we': 'we', 'other': 'other'})


if __name__ == '__main__':
    unittest.main()
