import unittest
import tempfile
from pathlib import Path
import numpy as np
import pandas as pd
from sklearn.datasets import make_classification
from sklearn.svm import SVC

from analysis.errors import InsufficientDataError, SchemaError, NumericError
from analysis.component_selection import ComponentSelector
from models.linear import LinearModelFitter, INTERCEPT
from models.classifiers import SVMClassifier, SVMRegressor, SupportVectorModel, create_svm
from models.evaluation import ModelEvaluator


class TestLinearModelFitter(unittest.TestCase):

    def setUp(self):
        np.random.seed(42)
        self.X = pd.DataFrame({'C1': np.random.normal(size=80), 'C2': np.random.normal(size=80)})
        self.y = 2.0 + 3.0 * self.X['C1'] + np.random.normal(0, 0.5, 80)
        self.fitter = LinearModelFitter()

    def test_coefficients(self):
        result = self.fitter.fit(self.X, self.y)

        self.assertEqual(result.predictors, [INTERCEPT, 'C1', 'C2'])
        self.assertAlmostEqual(result.coefficient('C1'), 3.0, delta=0.2)
        self.assertAlmostEqual(result.coefficient(INTERCEPT), 2.0, delta=0.2)
        p_values = result.coefficients.set_index('predictor')['p_value']
        self.assertLess(p_values['C1'], 1e-6)
        self.assertEqual(result.n_obs, 80)
        self.assertEqual(result.df_resid, 77)
        self.assertIn('adj R2', result.summary())

        with self.assertRaises(KeyError):
            result.coefficient('C9')

    def test_predict(self):
        result = self.fitter.fit(self.X, self.y)
        predicted = result.predict(self.X)
        self.assertEqual(predicted.shape, (80,))
        self.assertLess(np.mean((predicted - self.y) ** 2), 0.5)

    def test_array_input_names(self):
        result = self.fitter.fit(self.X['C1'].to_numpy(), self.y)
        self.assertEqual(result.predictors, [INTERCEPT, 'x1'])

    def test_matches_component_sweep(self):
        U = self.X.to_numpy()
        sweep = ComponentSelector().select_cutoff(self.y, U)
        result = self.fitter.fit(self.X, self.y)
        self.assertAlmostEqual(sweep.frame.loc[2, 'adj_r2'], result.adj_r2)

    def test_invalid_inputs(self):
        with self.assertRaises(SchemaError):
            self.fitter.fit(self.X, self.y[:10])

        X = self.X.copy()
        X.iloc[0, 0] = np.inf
        with self.assertRaises(NumericError):
            self.fitter.fit(X, self.y)

        with self.assertRaises(InsufficientDataError):
            self.fitter.fit(self.X.iloc[:3], self.y[:3])

        X = self.X.copy()
        X['C3'] = X['C1'] * 2
        with self.assertRaises(InsufficientDataError):
            self.fitter.fit(X, self.y)


class TestSupportVectorModels(unittest.TestCase):

    def setUp(self):
        self.X, self.y = make_classification(
            n_samples=200,
            n_features=5,
            n_informative=3,
            n_redundant=0,
            class_sep=2.0,
            random_state=42
        )

    def test_classifier_train_predict(self):
        clf = SVMClassifier(kernel='rbf')
        clf.train(self.X[:150], self.y[:150], feature_names=[f"C{i}" for i in range(1, 6)])

        preds = clf.predict(self.X[150:])
        self.assertEqual(len(preds), 50)
        self.assertGreater(np.mean(preds == self.y[150:]), 0.8)
        self.assertEqual(list(clf.classes), [0, 1])
        self.assertEqual(clf.feature_names[0], 'C1')

    def test_classifier_needs_two_classes(self):
        with self.assertRaises(ValueError):
            SVMClassifier().train(self.X[:10], np.zeros(10))

    def test_untrained_predict(self):
        with self.assertRaises(ValueError):
            SVMClassifier().predict(self.X)

    def test_save_and_load(self):
        clf = create_svm('classification', kernel='linear', C=0.5)
        clf.train(self.X, self.y)

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / 'svm.joblib'
            clf.save(str(path))
            loaded = SupportVectorModel.load(str(path))

        np.testing.assert_array_equal(loaded.predict(self.X), clf.predict(self.X))

    def test_factory(self):
        self.assertIsInstance(create_svm('regression'), SVMRegressor)
        with self.assertRaises(ValueError):
            create_svm('clustering')
        with self.assertRaises(ValueError):
            create_svm('classification', kernel='gaussian')

    def test_base_class_is_abstract(self):
        with self.assertRaises(TypeError):
            SupportVectorModel('SVM', SVC())


class TestModelEvaluator(unittest.TestCase):

    def setUp(self):
        np.random.seed(42)
        self.evaluator = ModelEvaluator()

    def test_classification_metrics(self):
        X, y = make_classification(n_samples=120, n_features=4, n_informative=2, n_redundant=0, random_state=0)
        labels = np.where(y == 1, 'gain', 'loss')
        clf = SVMClassifier()
        clf.train(X[:90], labels[:90])

        metrics = self.evaluator.evaluate(clf, X[90:], labels[90:])
        self.assertEqual(metrics['n_test'], 30)
        self.assertTrue(0 <= metrics['accuracy'] <= 1)
        self.assertEqual(metrics['confusion_matrix'].shape, (2, 2))
        self.assertEqual(metrics['confusion_matrix'].sum(), 30)

        frame = ModelEvaluator.to_frame(metrics, 'classification')
        self.assertEqual(set(frame['metric']), {'accuracy', 'macro_f1', 'n_test'})

    def test_regression_metrics(self):
        X = np.random.normal(size=(100, 3))
        y = X[:, 0] * 2 + np.random.normal(0, 0.1, 100)
        reg = SVMRegressor(kernel='linear')
        reg.train(X[:80], y[:80])

        metrics = self.evaluator.evaluate(reg, X[80:], y[80:])
        self.assertEqual(set(metrics), {'rmse', 'mae', 'r2', 'n_test'})
        self.assertGreater(metrics['r2'], 0.8)

    def test_untrained_model(self):
        with self.assertRaises(ValueError):
            self.evaluator.evaluate(SVMRegressor(), np.ones((2, 2)), np.ones(2))


if __name__ == '__main__':
    unittest.main()
