import unittest
import numpy as np
from general.structures.model_artifact import dump_model
from statml.data_lifecycle.computational_utilities.random_operations.number_generation import LinearCongruentialGenerator, lcg_sequence
from statml.data_lifecycle.computational_utilities.random_operations.sampling_methods import bootstrap_indices, bootstrap_sample, lcg_permutation
from statml.data_lifecycle.mathematical_foundations.algebraic_operations.matrix_operations import covariance_matrix, invert_matrix, multiply_matrices, power_iteration, ridge_pseudoinverse, transpose_matrix
from statml.data_lifecycle.preprocessing.scaling_normalization.minmax_scaling import minmax_scaler_fit, minmax_scaler_inverse_transform, minmax_scaler_transform
from statml.data_lifecycle.preprocessing.scaling_normalization.standard_scaling import standard_scaler_fit, standard_scaler_inverse_transform, standard_scaler_transform
from statml.data_lifecycle.splitting.random.reproducible_split import split_indices, train_test_split

class TestRandomOperations(unittest.TestCase):

    def test_lcg_first_draws(self):
        self.assertEqual(lcg_sequence(2, 42), [206659 / 233280, 190736 / 233280])
        generator = LinearCongruentialGenerator(42)
        generator.random()
        self.assertEqual(generator.state, 206659)

    def test_draws_depend_only_on_seed(self):
        self.assertEqual(lcg_sequence(50, 7), lcg_sequence(50, 7))
        self.assertNotEqual(lcg_sequence(5, 7), lcg_sequence(5, 8))
        self.assertTrue(all((0 <= v < 1 for v in lcg_sequence(200, 123))))

    def test_permutation_and_bootstrap(self):
        order = lcg_permutation(20, 3)
        self.assertEqual(sorted(order), list(range(20)))
        self.assertEqual(order, lcg_permutation(20, 3))
        draws = bootstrap_indices(15, 9)
        self.assertEqual(len(draws), 15)
        self.assertTrue(all((0 <= i < 15 for i in draws)))

    def test_bootstrap_sample_reports_out_of_bag(self):
        X = [[float(i)] for i in range(8)]
        result = bootstrap_sample(X, list(range(8)), seed=5)
        self.assertEqual(result['type'], 'split')
        self.assertEqual(len(result['X']), 8)
        self.assertEqual(set(result['indices']) | set(result['out_of_bag']), set(range(8)))
        self.assertFalse(set(result['indices']) & set(result['out_of_bag']))
        self.assertEqual([row[0] for row in result['X']], [float(i) for i in result['indices']])
        self.assertIn('error', bootstrap_sample(X, [1, 2]))

class TestSplitting(unittest.TestCase):

    def test_split_sizes_and_disjointness(self):
        (train, test) = split_indices(10, 0.2, 42)
        self.assertEqual(len(test), 2)
        self.assertEqual(len(train), 8)
        self.assertEqual(sorted(train + test), list(range(10)))

    def test_tiny_test_size_keeps_one_row(self):
        (train, test) = split_indices(5, 0.01)
        self.assertEqual(len(test), 1)

    def test_train_test_split_value(self):
        X = [[i, i * 2] for i in range(10)]
        y = [i % 2 for i in range(10)]
        result = train_test_split(X, y, {'test_size': 0.3, 'seed': 1})
        self.assertEqual(result['sizes'], {'train': 7, 'test': 3})
        for (row, label) in zip(result['X_test'], result['y_test']):
            self.assertEqual(label, row[0] % 2)
        self.assertEqual(result, train_test_split(X, y, {'test_size': 0.3, 'seed': 1}))
        self.assertIsNone(train_test_split(X)['y_train'])

    def test_split_errors(self):
        self.assertIn('error', train_test_split([[1], [2]], options={'test_size': 1.5}))
        self.assertIn('error', train_test_split([[1]]))
        self.assertIn('error', train_test_split([[1], [2]], [1]))

class TestScaling(unittest.TestCase):

    def setUp(self):
        self.X = [[1.0, 10.0, 5.0], [2.0, 20.0, 5.0], [3.0, 35.0, 5.0], [6.0, 15.0, 5.0]]

    def test_standard_scaler_centres_and_scales(self):
        model = standard_scaler_fit(self.X)
        self.assertEqual(model['type'], 'standard_scaler')
        data = np.array(standard_scaler_transform(model, self.X)['data'])
        np.testing.assert_allclose(data[:, :2].mean(axis=0), 0.0, atol=1e-09)
        np.testing.assert_allclose(data[:, :2].std(axis=0, ddof=1), 1.0, atol=1e-09)
        np.testing.assert_array_equal(data[:, 2], 0.0)

    def test_standard_scaler_inverse_and_text_model(self):
        model = dump_model(standard_scaler_fit(self.X))
        data = standard_scaler_transform(model, self.X)['data']
        restored = standard_scaler_inverse_transform(model, data)['data']
        np.testing.assert_allclose(restored, self.X)

    def test_minmax_scaler(self):
        model = minmax_scaler_fit(self.X)
        data = np.array(minmax_scaler_transform(model, self.X)['data'])
        self.assertEqual(data[:, :2].min(), 0.0)
        self.assertEqual(data[:, :2].max(), 1.0)
        np.testing.assert_array_equal(data[:, 2], 0.0)
        np.testing.assert_allclose(minmax_scaler_inverse_transform(model, data.tolist())['data'], self.X)

    def test_width_and_model_errors(self):
        model = standard_scaler_fit(self.X)
        self.assertIn('error', standard_scaler_transform(model, [[1.0, 2.0]]))
        self.assertEqual(standard_scaler_transform({'type': 'minmax_scaler'}, self.X)['error'], 'invalid model')
        self.assertEqual(minmax_scaler_transform('not json', self.X)['error'], 'invalid model text')

class TestMatrixOperations(unittest.TestCase):

    def setUp(self):
        self.A = [[4.0, 7.0], [2.0, 6.0]]

    def test_products_and_transpose(self):
        B = [[1.0, 2.0, 3.0], [0.0, 1.0, -1.0]]
        np.testing.assert_allclose(multiply_matrices(self.A, B), np.dot(self.A, B))
        np.testing.assert_array_equal(transpose_matrix(B), np.array(B).T)

    def test_inverse(self):
        np.testing.assert_allclose(invert_matrix(self.A), np.linalg.inv(self.A))
        np.testing.assert_allclose(multiply_matrices(self.A, invert_matrix(self.A)), np.eye(2), atol=1e-12)

    def test_ridge_pseudoinverse_is_left_inverse(self):
        A = [[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]]
        np.testing.assert_allclose(multiply_matrices(ridge_pseudoinverse(A), A), np.eye(2), atol=1e-06)

    def test_covariance_matrix(self):
        X = [[2.5, 2.4], [0.5, 0.7], [2.2, 2.9], [1.9, 2.2], [3.1, 3.0]]
        np.testing.assert_allclose(covariance_matrix(X), np.cov(np.array(X).T))

    def test_power_iteration_finds_eigenpairs(self):
        C = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 0.0], [0.0, 0.0, 1.0]])
        (components, eigenvalues) = power_iteration(C, 3)
        expected = np.sort(np.linalg.eigvalsh(C))[::-1]
        np.testing.assert_allclose(eigenvalues, expected, atol=1e-06)
        np.testing.assert_allclose(components @ components.T, np.eye(3), atol=1e-09)
