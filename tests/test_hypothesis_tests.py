import math
import unittest
import numpy as np
from scipy import stats
from statml.data_lifecycle.mathematical_foundations.statistical_methods.confidence_intervals import confidence_interval_difference, confidence_interval_mean, confidence_interval_proportion, confidence_interval_variance
from statml.data_lifecycle.mathematical_foundations.statistical_methods.hypothesis_testing import anova_oneway, chi_square_goodness_of_fit, chi_square_independence, levene_test, t_test_independent, t_test_one_sample, t_test_paired, z_test_one_sample
from statml.data_lifecycle.mathematical_foundations.statistical_methods.nonparametric_tests import kruskal_wallis, mann_whitney_u, wilcoxon_signed_rank
from statml.data_lifecycle.mathematical_foundations.statistical_methods.normality_tests import jarque_bera, shapiro_wilk

class TestTTests(unittest.TestCase):

    def setUp(self):
        self.a = [10, 12, 9, 11, 10]
        self.b = [8, 7, 9, 10, 8]

    def test_independent_pooled(self):
        result = t_test_independent(self.a, self.b)
        self.assertEqual(result['type'], 'hypothesis_test')
        self.assertEqual(result['name'], 'independent_t_test')
        self.assertEqual(result['df'], 8)
        self.assertTrue(0 < result['p_value'] < 1)
        self.assertAlmostEqual(result['statistic'], 2.7735, places=4)
        expected = stats.ttest_ind(self.a, self.b)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)
        self.assertTrue(result['significant'])

    def test_independent_welch(self):
        (a, b) = ([1.2, 3.4, 2.2, 5.1, 4.0, 3.3], [7.5, 2.0, 9.9, 4.4])
        result = t_test_independent(a, b, equal_var=False)
        expected = stats.ttest_ind(a, b, equal_var=False)
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)
        self.assertLess(result['df'], len(a) + len(b) - 2)

    def test_paired_and_one_sample(self):
        (before, after) = ([5.1, 4.8, 6.0, 5.5, 5.9, 4.7], [5.6, 5.0, 6.1, 6.2, 6.0, 5.1])
        paired = t_test_paired(before, after)
        expected = stats.ttest_rel(before, after)
        self.assertAlmostEqual(paired['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(paired['p_value'], float(expected.pvalue), delta=1e-06)
        one = t_test_one_sample(before, 5.0)
        expected = stats.ttest_1samp(before, 5.0)
        self.assertAlmostEqual(one['statistic'], float(expected.statistic), places=10)
        self.assertEqual(one['df'], 5)

    def test_z_test_with_known_sigma(self):
        result = z_test_one_sample([1.0, 2.0, 3.0, 4.0], mu0=2.0, sigma=2.0)
        self.assertAlmostEqual(result['statistic'], 0.5, places=12)
        self.assertAlmostEqual(result['p_value'], 2 * float(stats.norm.sf(0.5)), delta=1e-06)
        self.assertTrue(result['sigma_known'])

    def test_errors(self):
        for result in (t_test_independent([1], [2, 3]), t_test_independent([1, 1], [2, 2]), t_test_one_sample([3, 3, 3]), t_test_independent(self.a, self.b, alpha=1.5)):
            self.assertEqual(result['type'], 'hypothesis_test')
            self.assertIn('error', result)
        self.assertIn('insufficient data', t_test_independent([1], [2, 3])['error'])
        self.assertIn('error', t_test_paired([1, 2, 3], [1, 2]))

class TestVarianceTests(unittest.TestCase):

    def setUp(self):
        self.groups = [[4.2, 5.1, 3.9, 4.8, 5.0], [6.3, 5.9, 7.1, 6.6], [5.0, 5.4, 4.7, 5.9, 6.0, 5.2]]

    def test_anova_matches_scipy(self):
        result = anova_oneway(self.groups)
        expected = stats.f_oneway(*self.groups)
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)
        self.assertEqual(result['df'], [2, 12])
        self.assertTrue(0 <= result['eta_squared'] <= 1)

    def test_levene_uses_median_center(self):
        result = levene_test(self.groups)
        expected = stats.levene(*self.groups, center='median')
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)

    def test_group_requirements(self):
        self.assertIn('error', anova_oneway([[1, 2, 3]]))
        self.assertIn('error', anova_oneway([[1, 1], [1, 1]]))

class TestChiSquare(unittest.TestCase):

    def test_independence_matches_scipy(self):
        table = [[10, 20, 30], [6, 9, 17]]
        result = chi_square_independence(table)
        (statistic, p_value, dof, expected) = stats.chi2_contingency(table, correction=False)
        self.assertAlmostEqual(result['statistic'], float(statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(p_value), delta=1e-06)
        self.assertEqual(result['df'], dof)
        np.testing.assert_allclose(result['expected'], expected)

    def test_goodness_of_fit_defaults_to_uniform(self):
        observed = [18, 22, 30, 30]
        result = chi_square_goodness_of_fit(observed)
        expected = stats.chisquare(observed)
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)

    def test_bad_tables(self):
        self.assertIn('error', chi_square_independence([[1, 2, 3]]))
        self.assertIn('error', chi_square_independence([[0, 0], [1, 2]]))
        self.assertIn('error', chi_square_independence([[1, -2], [1, 2]]))

class TestNonparametric(unittest.TestCase):

    def test_mann_whitney(self):
        (a, b) = ([1.1, 2.3, 3.5, 4.2, 5.0], [6.1, 7.4, 3.9, 8.8])
        result = mann_whitney_u(a, b)
        self.assertEqual(result['u1'] + result['u2'], len(a) * len(b))
        self.assertEqual(result['statistic'], min(result['u1'], result['u2']))
        self.assertAlmostEqual(result['u1'], float(stats.mannwhitneyu(a, b, alternative='two-sided').statistic), places=10)
        mu = len(a) * len(b) / 2.0
        sigma = math.sqrt(len(a) * len(b) * (len(a) + len(b) + 1) / 12.0)
        self.assertAlmostEqual(result['z'], (result['statistic'] - mu) / sigma, places=12)
        self.assertTrue(0 < result['p_value'] <= 1)

    def test_kruskal_without_ties_matches_scipy(self):
        groups = [[2.9, 3.0, 2.5, 2.6, 3.2], [3.8, 2.7, 4.0, 2.4], [2.8, 3.4, 3.7, 2.2, 2.0]]
        result = kruskal_wallis(groups)
        expected = stats.kruskal(*groups)
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)
        self.assertEqual(result['df'], 2)

    def test_wilcoxon_drops_zero_differences(self):
        a = [5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
        b = [5.0, 5.5, 7.5, 6.0, 8.0, 7.0]
        result = wilcoxon_signed_rank(a, b)
        self.assertEqual(result['n'], 5)
        self.assertEqual(result['n_zero_dropped'], 1)
        self.assertEqual(result['w_plus'] + result['w_minus'], 15.0)
        self.assertIn('error', wilcoxon_signed_rank([1, 2], [1, 2]))

class TestNormality(unittest.TestCase):

    def test_shapiro_wilk_close_to_scipy(self):
        samples = ([2.1, 3.4, 1.9, 5.6, 4.4, 3.3, 2.8, 4.9, 3.7, 2.2, 6.1, 3.0, 4.2], [1.0, 1.2, 1.1, 1.3, 1.05, 5.0, 9.0, 1.15], [1.0, 2.0, 4.0])
        for sample in samples:
            result = shapiro_wilk(sample)
            expected = stats.shapiro(sample)
            self.assertAlmostEqual(result['statistic'], float(expected.statistic), delta=0.01)
            self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=0.01)
            self.assertIn('note', result)
        self.assertFalse(shapiro_wilk(samples[1])['is_normal'])

    def test_shapiro_wilk_limits(self):
        self.assertIn('error', shapiro_wilk([1.0, 2.0]))
        self.assertIn('error', shapiro_wilk([4.0, 4.0, 4.0, 4.0]))

    def test_jarque_bera_matches_scipy(self):
        sample = [2.1, 3.4, 1.9, 5.6, 4.4, 3.3, 2.8, 4.9, 3.7, 2.2, 6.1, 3.0, 4.2, 12.0]
        result = jarque_bera(sample)
        expected = stats.jarque_bera(sample)
        self.assertAlmostEqual(result['statistic'], float(expected.statistic), places=10)
        self.assertAlmostEqual(result['p_value'], float(expected.pvalue), delta=1e-06)
        self.assertIn('error', jarque_bera([1.0, 2.0, 3.0]))

class TestConfidenceIntervals(unittest.TestCase):

    def setUp(self):
        self.sample = [12.1, 11.4, 13.0, 12.7, 11.9, 12.3, 12.8, 11.6]

    def test_mean_interval_uses_exact_t(self):
        result = confidence_interval_mean(self.sample, 0.95)
        (lower, upper) = stats.t.interval(0.95, len(self.sample) - 1, loc=np.mean(self.sample), scale=stats.sem(self.sample))
        self.assertEqual(result['type'], 'confidence_interval')
        self.assertEqual(result['parameter'], 'mean')
        self.assertAlmostEqual(result['lower'], float(lower), delta=1e-05)
        self.assertAlmostEqual(result['upper'], float(upper), delta=1e-05)
        self.assertAlmostEqual(result['upper'] - result['lower'], 2 * result['margin'], places=12)

    def test_variance_interval(self):
        result = confidence_interval_variance(self.sample, 0.9)
        df = len(self.sample) - 1
        s2 = float(np.var(self.sample, ddof=1))
        self.assertAlmostEqual(result['lower'], df * s2 / float(stats.chi2.ppf(0.95, df)), delta=1e-05)
        self.assertAlmostEqual(result['upper'], df * s2 / float(stats.chi2.ppf(0.05, df)), delta=1e-05)
        self.assertLess(result['lower'], s2)
        self.assertGreater(result['upper'], s2)

    def test_proportion_interval(self):
        wald = confidence_interval_proportion(45, 100)
        z = float(stats.norm.ppf(0.975))
        self.assertEqual(wald['method'], 'wald')
        self.assertAlmostEqual(wald['margin'], z * math.sqrt(0.45 * 0.55 / 100), delta=1e-05)
        wilson = confidence_interval_proportion(0, 10, method='wilson')
        self.assertAlmostEqual(wilson['lower'], 0.0, places=12)
        self.assertGreater(wilson['upper'], 0.0)
        self.assertIn('error', confidence_interval_proportion(11, 10))
        self.assertIn('error', confidence_interval_proportion(5, 10, method='exact'))

    def test_difference_interval(self):
        (a, b) = ([10, 12, 9, 11, 10], [8, 7, 9, 10, 8])
        pooled = confidence_interval_difference(a, b, equal_var=True)
        self.assertEqual(pooled['df'], 8)
        self.assertAlmostEqual(pooled['estimate'], 2.0, places=12)
        self.assertAlmostEqual(pooled['margin'], float(stats.t.ppf(0.975, 8)) * math.sqrt(0.52), delta=1e-05)
        welch = confidence_interval_difference(a, b)
        self.assertFalse(welch['equal_var'])
        self.assertLess(welch['lower'], 2.0)

    def test_confidence_must_be_in_unit_interval(self):
        self.assertIn('error', confidence_interval_mean(self.sample, 1.0))
        self.assertIn('error', confidence_interval_mean([1.0]))

    def test_success_and_error_values_share_name(self):
        cases = [(confidence_interval_mean, (self.sample,), ([1.0],)), (confidence_interval_variance, (self.sample,), ([1.0],)), (confidence_interval_proportion, (4, 10), (11, 10)), (confidence_interval_difference, (self.sample, self.sample), ([1.0], self.sample))]
        for (func, good, bad) in cases:
            (success, failure) = (func(*good), func(*bad))
            self.assertIn('error', failure)
            self.assertNotIn('error', success)
            self.assertEqual(success['name'], failure['name'])
            self.assertEqual(success['name'], success['parameter'])
