import logging
from typing import Any, Dict, List, Optional, Union
import numpy as np
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, returns_tagged
from statml.data_lifecycle.mathematical_foundations.algebraic_operations.matrix_operations import multiply_matrices, ridge_pseudoinverse
from statml.models.evaluation.performance_metrics.regression import mean_squared_error, r2_score
SOLVERS = ('gradient_descent', 'closed_form')

def add_bias_column(X: np.ndarray) -> np.ndarray:
    """Prepend a column of ones so that ``weights[0]`` acts as the intercept."""
    return np.hstack([np.ones((X.shape[0], 1)), X])

def linear_predict(weights: Union[np.ndarray, List[float]], X: np.ndarray) -> np.ndarray:
    weights = np.asarray(weights, dtype=float)
    return weights[0] + X @ weights[1:]

class LinearRegression(BaseModel):
    """
    Least-squares linear regression with optional L1/L2 penalties on the non-bias weights.

    The default solver is batch gradient descent from zero weights on
    ``MSE + l2 * ||w||^2 + l1 * ||w||_1``; ``solver='closed_form'`` uses the
    ridge-stabilized pseudoinverse of the bias-augmented design matrix instead.
    """
    model_type = 'linear_regression'
    task = 'regression'
    numeric_targets = True

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fit the weights.

        Parameters
        ----------
        batch : DataBatch
            Training matrix and numeric targets
        options : Dict[str, Any]
            ``learning_rate``, ``iterations``, ``l2``, ``l1``, ``solver`` and ``ridge_lambda``

        Returns
        -------
        Dict[str, Any]
            ``weights``, training ``mse`` and ``r2``, and the options used
        """
        solver = options['solver']
        if solver not in SOLVERS:
            raise InputError(f"solver must be one of {', '.join(SOLVERS)}, got '{solver}'")
        (l1, l2) = (float(options['l1']), float(options['l2']))
        if l1 < 0 or l2 < 0:
            raise InputError('Regularization strengths must be non-negative')
        Xb = add_bias_column(batch.data)
        y = batch.labels
        if solver == 'closed_form':
            weights = multiply_matrices(ridge_pseudoinverse(Xb, float(options['ridge_lambda'])), y.reshape(-1, 1)).ravel()
            final_loss = None
        else:
            (weights, final_loss) = self._gradient_descent(Xb, y, float(options['learning_rate']), int(options['iterations']), l1, l2)
        predictions = Xb @ weights
        regularization = 'l1' if l1 > 0 else 'l2' if l2 > 0 else 'none'
        return {'weights': weights, 'mse': mean_squared_error(y, predictions), 'r2': r2_score(y, predictions), 'final_loss': final_loss, 'solver': solver, 'learning_rate': options['learning_rate'], 'iterations': options['iterations'], 'regularization': regularization, 'l1': l1, 'l2': l2}

    def _gradient_descent(self, Xb: np.ndarray, y: np.ndarray, learning_rate: float, iterations: int, l1: float, l2: float) -> tuple:
        if learning_rate <= 0:
            raise InputError(f'learning_rate must be positive, got {learning_rate}')
        if iterations < 1:
            raise InputError(f'iterations must be at least 1, got {iterations}')
        n = Xb.shape[0]
        weights = np.zeros(Xb.shape[1])
        for iteration in range(iterations):
            residuals = Xb @ weights - y
            gradient = 2.0 / n * (Xb.T @ residuals)
            gradient[1:] += 2.0 * l2 * weights[1:] + l1 * np.sign(weights[1:])
            weights = weights - learning_rate * gradient
            if not np.all(np.isfinite(weights)):
                logging.warning(f'Gradient descent diverged at iteration {iteration} (learning_rate={learning_rate}); consider a smaller learning rate or scaling the features')
                break
        residuals = Xb @ weights - y
        loss = float(np.mean(residuals ** 2) + l2 * np.sum(weights[1:] ** 2) + l1 * np.sum(np.abs(weights[1:])))
        return (weights, loss)

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[float]:
        return linear_predict(model['weights'], X).tolist()
LINEAR_REGRESSION = LinearRegression()

@returns_tagged('linear_regression')
def train_linear_regression(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Train a linear regression model.

    Args:
        X: Row-major feature matrix of shape (n, p).
        y: Numeric targets of length n.
        options (dict): ``learning_rate`` (0.01), ``iterations`` (1000), ``l2`` (0), ``l1`` (0),
            ``solver`` (``'gradient_descent'`` or ``'closed_form'``), ``ridge_lambda`` (1e-8).

    Returns:
        dict: ``{type: 'linear_regression', weights[0..p], mse, r2, n, p, ...}`` with
        ``weights[0]`` the bias.
    """
    return LINEAR_REGRESSION.train(X, y, options)

@returns_tagged('prediction', 'linear_regression')
def predict_linear(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Predict ``w0 + sum_j wj xj`` for every row of ``X``."""
    return LINEAR_REGRESSION.predict(model, X)
