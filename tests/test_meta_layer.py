import unittest
import numpy as np
from general.structures.model_artifact import dump_model
from general.structures.tagged_result import InputError
from statml.data_lifecycle.modeling.validation.cross_validation.k_fold_validation import cross_validate, k_fold_indices
from statml.data_lifecycle.preprocessing.scaling_normalization.standard_scaling import standard_scaler_fit, standard_scaler_transform
from statml.model_methods.ensemble_methods.voting import ensemble_voting_classifier, ensemble_voting_regressor
from statml.models.evaluation.performance_metrics.classification import metrics_classification
from statml.models.evaluation.performance_metrics.regression import metrics_regression, r2_score
from statml.models.neighbors.k_nearest_neighbors import predict_knn_regressor, train_knn_classifier, train_knn_regressor
from statml.models.registry import SUPERVISED_MODELS, UNSUPERVISED_MODELS, get_entry, model_types
from statml.models.regression.linear.linear_regression import train_linear_regression
from statml.models.trees_and_forests.decision_trees.cart import train_decision_tree_classifier, train_decision_tree_regressor
from statml.models.trees_and_forests.feature_importance import feature_importance_tree
from statml.models.trees_and_forests.random_forest import train_random_forest_classifier

class TestMetrics(unittest.TestCase):

    def test_binary_counts(self):
        result = metrics_classification([1, 0, 1, 1, 0], [1, 1, 1, 0, 0])
        self.assertEqual((result['tp'], result['fp'], result['fn'], result['tn']), (2, 1, 1, 1))
        self.assertAlmostEqual(result['accuracy'], 0.6)
        self.assertAlmostEqual(result['precision'], 2 / 3)
        self.assertAlmostEqual(result['recall'], 2 / 3)
        self.assertAlmostEqual(result['f1'], 2 / 3)
        self.assertEqual(result['confusion_matrix'], [[1, 1], [1, 2]])

    def test_averaging(self):
        (y_true, y_pred) = ([0, 1, 2, 2], [0, 2, 2, 2])
        macro = metrics_classification(y_true, y_pred, average='macro')
        self.assertAlmostEqual(macro['precision'], (1 + 0 + 2 / 3) / 3)
        self.assertAlmostEqual(macro['recall'], 2 / 3)
        self.assertAlmostEqual(macro['f1'], 0.6)
        self.assertEqual(macro['per_class']['1']['support'], 1)
        micro = metrics_classification(y_true, y_pred, average='micro')
        self.assertAlmostEqual(micro['f1'], 0.75)
        weighted = metrics_classification(y_true, y_pred, average='weighted')
        self.assertAlmostEqual(weighted['recall'], 0.75)

    def test_metric_errors(self):
        self.assertIn('error', metrics_classification([1, 0], [1]))
        self.assertIn('error', metrics_classification([1], [1], average='samples'))
        self.assertIn('error', metrics_regression([], []))

    def test_regression_metrics(self):
        result = metrics_regression([3.0, -0.5, 2.0, 7.0], [2.5, 0.0, 2.0, 8.0])
        self.assertAlmostEqual(result['mse'], 0.375)
        self.assertAlmostEqual(result['mae'], 0.5)
        self.assertAlmostEqual(result['rmse'], 0.375 ** 0.5)
        self.assertAlmostEqual(result['r2'], 0.9486081370449679)
        self.assertEqual(r2_score([2, 2], [2, 2]), 1.0)
        self.assertEqual(r2_score([2, 2], [1, 3]), 0.0)

class TestCrossValidation(unittest.TestCase):

    def setUp(self):
        self.X = [[float(i), float((i * 7) % 5) * 10.0] for i in range(12)]
        self.y = [2.0 * i + (i % 3) for i in range(12)]

    def test_fold_partition(self):
        folds = k_fold_indices(10, 3, seed=4)
        self.assertEqual([len(f) for f in folds], [3, 3, 4])
        self.assertEqual(sorted(sum(folds, [])), list(range(10)))
        self.assertEqual(k_fold_indices(4, 2, shuffle=False), [[0, 1], [2, 3]])
        with self.assertRaises(InputError):
            k_fold_indices(3, 4)

    def test_scores_summary(self):
        result = cross_validate(self.X, self.y, 'linear_regression', {'k_folds': 3, 'solver': 'closed_form'})
        self.assertEqual((result['type'], result['name'], result['metric']), ('cross_validation', 'linear_regression', 'r2'))
        self.assertEqual(len(result['scores']), 3)
        self.assertAlmostEqual(result['mean'], float(np.mean(result['scores'])))
        self.assertAlmostEqual(result['std'], float(np.std(result['scores'], ddof=1)))
        self.assertEqual(result['fold_sizes'], [4, 4, 4])

    def test_normalized_folds_match_manual_loop(self):
        options = {'k_folds': 4, 'normalize': True, 'seed': 11, 'k': 2}
        result = cross_validate(self.X, self.y, 'knn_regressor', options)
        expected = []
        for test_idx in k_fold_indices(len(self.X), 4, True, 11):
            train_idx = [i for i in range(len(self.X)) if i not in test_idx]
            X_train = [self.X[i] for i in train_idx]
            scaler = standard_scaler_fit(X_train)
            model = train_knn_regressor(standard_scaler_transform(scaler, X_train)['data'], [self.y[i] for i in train_idx], {'k': 2})
            predictions = predict_knn_regressor(model, standard_scaler_transform(scaler, [self.X[i] for i in test_idx])['data'])['predictions']
            expected.append(r2_score([self.y[i] for i in test_idx], predictions))
        np.testing.assert_allclose(result['scores'], expected, atol=1e-12)

    def test_classifier_uses_accuracy(self):
        labels = ['a' if i < 6 else 'b' for i in range(12)]
        result = cross_validate(self.X, labels, 'knn_classifier', {'k_folds': 3, 'k': 1})
        self.assertEqual(result['metric'], 'accuracy')
        self.assertTrue(all((0.0 <= s <= 1.0 for s in result['scores'])))

    def test_errors(self):
        self.assertIn('error', cross_validate(self.X, self.y, 'kmeans'))
        self.assertIn('error', cross_validate(self.X, self.y, 'linear_regression', {'k_folds': 20}))
        self.assertIn('error', cross_validate(self.X, self.y[:5], 'linear_regression'))
        self.assertIn('error', cross_validate(self.X, self.y, 'knn_regressor', {'k': 0}))

class TestEnsembles(unittest.TestCase):

    def setUp(self):
        self.X = [[0.0], [1.0], [2.0], [10.0], [11.0], [12.0]]
        self.labels = [0, 0, 0, 1, 1, 1]
        self.targets = [0.0, 1.0, 2.0, 10.0, 11.0, 12.0]

    def test_hard_voting_mixes_model_kinds(self):
        models = [train_knn_classifier(self.X, self.labels, {'k': 3}), dump_model(train_decision_tree_classifier(self.X, self.labels)), train_random_forest_classifier(self.X, self.labels, {'n_estimators': 3})]
        result = ensemble_voting_classifier(models, [[1.0], [11.0]])
        self.assertEqual(result['type'], 'ensemble_prediction')
        self.assertEqual(result['predictions'], [0, 1])
        self.assertEqual(result['model_types'], ['knn_classifier', 'decision_tree_classifier', 'random_forest_classifier'])
        self.assertEqual(result['n_models'], 3)

    def test_ties_go_to_earliest_model(self):
        always_zero = train_decision_tree_classifier(self.X, [0] * 6)
        always_one = train_decision_tree_classifier(self.X, [1] * 6)
        self.assertEqual(ensemble_voting_classifier([always_one, always_zero], [[5.0]])['predictions'], [1])

    def test_regressor_averages(self):
        models = [train_linear_regression(self.X, self.targets, {'solver': 'closed_form'}), train_decision_tree_regressor(self.X, self.targets)]
        result = ensemble_voting_regressor(models, [[1.0]])
        self.assertAlmostEqual(result['predictions'][0], 1.0, places=4)

    def test_errors(self):
        classifier = train_knn_classifier(self.X, self.labels)
        regressor = train_knn_regressor(self.X, self.targets)
        self.assertIn('error', ensemble_voting_classifier([classifier], self.X, voting='soft'))
        self.assertIn('error', ensemble_voting_classifier([classifier, regressor], self.X))
        self.assertIn('error', ensemble_voting_regressor([], self.X))
        self.assertIn('error', ensemble_voting_regressor([regressor], [[1.0, 2.0]]))

class TestFeatureImportance(unittest.TestCase):

    def test_only_used_feature_gets_credit(self):
        X = [[5.0, 1.0], [5.0, 2.0], [5.0, 3.0], [5.0, 4.0]]
        model = train_decision_tree_classifier(X, ['a', 'a', 'b', 'b'])
        result = feature_importance_tree(model)
        self.assertEqual(result['type'], 'feature_importance')
        self.assertEqual(result['importances'], [0.0, 1.0])
        self.assertEqual(result['n_trees'], 1)

    def test_forest_importances_sum_to_one(self):
        X = [[i, (i * 3) % 7, 1.0] for i in range(12)]
        model = train_random_forest_classifier(X, [i // 6 for i in range(12)], {'n_estimators': 4})
        importances = feature_importance_tree(dump_model(model))['importances']
        self.assertAlmostEqual(sum(importances), 1.0)
        self.assertEqual(importances[2], 0.0)

    def test_leaf_only_tree_and_wrong_type(self):
        model = train_decision_tree_classifier([[1.0], [2.0]], ['a', 'a'])
        self.assertEqual(feature_importance_tree(model)['importances'], [0.0])
        self.assertEqual(feature_importance_tree(train_knn_classifier([[1.0]], ['a']))['error'], 'invalid model')

class TestRegistry(unittest.TestCase):

    def test_entries(self):
        self.assertEqual(len(SUPERVISED_MODELS), 9)
        self.assertEqual(get_entry('knn_regressor').task, 'regression')
        self.assertTrue(get_entry('naive_bayes').supervised)
        self.assertIn('logistic_regression', model_types('classification'))
        self.assertNotIn('linear_regression', model_types('classification'))
        self.assertFalse(UNSUPERVISED_MODELS['kmeans'].supervised)
        self.assertEqual(UNSUPERVISED_MODELS['kmeans'].task, 'clustering')

    def test_unknown_or_mismatched(self):
        with self.assertRaises(InputError):
            get_entry('kmeans')
        with self.assertRaises(InputError):
            get_entry('linear_regression', 'classification')
