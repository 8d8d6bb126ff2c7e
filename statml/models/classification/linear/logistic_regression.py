import logging
from typing import Any, Dict, List, Optional, Union
import numpy as np
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.models.regression.linear.linear_regression import add_bias_column, linear_predict

def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function, clipped to keep ``exp`` finite."""
    return 1.0 / (1.0 + np.exp(-np.clip(z, -500, 500)))

class LogisticRegression(BaseModel):
    """
    Binary logistic regression trained by batch gradient descent on the mean log-loss.

    Targets must be 0/1. Weights start at zero; the optional L2 penalty skips the bias.
    """
    model_type = 'logistic_regression'
    task = 'classification'
    numeric_targets = True

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        y = batch.labels
        if not np.all(np.isin(y, [0.0, 1.0])):
            raise InputError('Logistic regression is binary: targets must be 0 or 1')
        learning_rate = float(options['learning_rate'])
        iterations = int(options['iterations'])
        l2 = float(options['l2'])
        if learning_rate <= 0:
            raise InputError(f'learning_rate must be positive, got {learning_rate}')
        if iterations < 1:
            raise InputError(f'iterations must be at least 1, got {iterations}')
        if l2 < 0:
            raise InputError('l2 must be non-negative')
        Xb = add_bias_column(batch.data)
        n = Xb.shape[0]
        weights = np.zeros(Xb.shape[1])
        for iteration in range(iterations):
            probabilities = sigmoid(Xb @ weights)
            gradient = Xb.T @ (probabilities - y) / n
            gradient[1:] += 2.0 * l2 * weights[1:]
            weights = weights - learning_rate * gradient
            if not np.all(np.isfinite(weights)):
                logging.warning(f'Gradient descent diverged at iteration {iteration} (learning_rate={learning_rate})')
                break
        probabilities = np.clip(sigmoid(Xb @ weights), 1e-15, 1 - 1e-15)
        log_loss = float(-np.mean(y * np.log(probabilities) + (1 - y) * np.log(1 - probabilities)))
        accuracy = float(np.mean((probabilities >= 0.5).astype(float) == y))
        return {'weights': weights, 'accuracy': accuracy, 'log_loss': log_loss, 'learning_rate': learning_rate, 'iterations': iterations, 'l2': l2}

    def predict_proba(self, model: Dict[str, Any], X: np.ndarray) -> np.ndarray:
        return sigmoid(linear_predict(model['weights'], X))

    def predict_values(self, model: Dict[str, Any], X: np.ndarray, threshold: float=0.5) -> List[int]:
        return [int(p >= threshold) for p in self.predict_proba(model, X)]

    def predict(self, model: Union[Dict[str, Any], str], X: Any, threshold: float=0.5) -> Dict[str, Any]:
        if not 0 < threshold < 1:
            raise InputError(f'threshold must be between 0 and 1, got {threshold}')
        (model, X) = self.load(model, X)
        probabilities = self.predict_proba(model, X)
        return ok('prediction', self.model_type, predictions=[int(p >= threshold) for p in probabilities], probabilities=probabilities, threshold=threshold, n=X.shape[0])
LOGISTIC_REGRESSION = LogisticRegression()

@returns_tagged('logistic_regression')
def train_logistic_regression(X: Any, y: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Train a binary logistic regression model.

    Args:
        X: Row-major feature matrix.
        y: Targets in {0, 1}.
        options (dict): ``learning_rate`` (0.1), ``iterations`` (1000), ``l2`` (0).

    Returns:
        dict: ``{type: 'logistic_regression', weights[0..p], accuracy, log_loss, n, p, ...}``.
    """
    return LOGISTIC_REGRESSION.train(X, y, options)

@returns_tagged('prediction', 'logistic_regression')
def predict_logistic(model: Union[Dict[str, Any], str], X: Any, threshold: float=0.5) -> Dict[str, Any]:
    """
    Sigmoid probabilities and thresholded class labels.

    Returns:
        dict: ``{type: 'prediction', name: 'logistic_regression', probabilities, predictions, threshold, n}``.
    """
    return LOGISTIC_REGRESSION.predict(model, X, threshold)
