from typing import Any, Dict, List, Optional, Union
import numpy as np
from general.base_classes.model_base import BaseModel
from general.structures.data_batch import DataBatch, as_matrix
from general.structures.model_artifact import ModelFormatError, load_model
from general.structures.tagged_result import InputError, ok, returns_tagged
from statml.data_lifecycle.mathematical_foundations.algebraic_operations.matrix_operations import POWER_ITERATIONS, covariance_matrix, power_iteration

class PCA(BaseModel):
    """
    Principal Component Analysis by power iteration on the sample covariance matrix.

    Components are found one at a time with symmetric deflation, so they come
    out in order of decreasing explained variance. The start vectors are drawn
    from the seeded LCG, which makes a fit reproducible from its ``seed``.
    """
    model_type = 'pca'
    task = 'decomposition'
    numeric_targets = True
    supervised = False

    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fit the principal axes.

        Parameters
        ----------
        batch : DataBatch
            Data matrix with at least two rows
        options : Dict[str, Any]
            ``n_components`` (at most the number of columns) and ``seed``

        Returns
        -------
        Dict[str, Any]
            ``means``, ``components`` (one unit row per component),
            ``explained_variance`` and ``explained_variance_ratio``
        """
        n_components = int(options['n_components'])
        if not 1 <= n_components <= batch.n_features:
            raise InputError(f'n_components must be between 1 and {batch.n_features}, got {n_components}')
        means = batch.data.mean(axis=0)
        covariance = covariance_matrix(batch.data, means)
        (components, eigenvalues) = power_iteration(covariance, n_components, POWER_ITERATIONS, int(options['seed']))
        total_variance = float(np.trace(covariance))
        ratio = eigenvalues / total_variance if total_variance > 0 else np.zeros_like(eigenvalues)
        return {'n_components': n_components, 'means': means, 'components': components, 'explained_variance': eigenvalues, 'explained_variance_ratio': ratio, 'seed': int(options['seed'])}

    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[List[float]]:
        means = np.asarray(model['means'], dtype=float)
        components = np.asarray(model['components'], dtype=float)
        return ((X - means) @ components.T).tolist()

    def predict(self, model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
        (model, X) = self.load(model, X)
        return ok('scaled_data', method='pca', data=self.predict_values(model, X), n=X.shape[0], p=int(model['n_components']))

    def inverse(self, model: Union[Dict[str, Any], str], Z: Any) -> Dict[str, Any]:
        model = load_model(model, [self.model_type])
        Z = as_matrix(Z, 'Z')
        if Z.shape[1] != int(model['n_components']):
            raise ModelFormatError('invalid model')
        restored = Z @ np.asarray(model['components'], dtype=float) + np.asarray(model['means'], dtype=float)
        return ok('scaled_data', method='pca_inverse', data=restored, n=Z.shape[0], p=int(model['p']))
PCA_MODEL = PCA()

@returns_tagged('pca')
def train_pca(X: Any, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
    """
    Fit a PCA model.

    Args:
        X: Row-major data matrix with at least two rows.
        options (dict): ``n_components`` (2) and ``seed`` (42).

    Returns:
        dict: ``{type: 'pca', means, components, explained_variance, explained_variance_ratio,
        n_components, seed, n, p}``.
    """
    return PCA_MODEL.train(X, None, options)

@returns_tagged('scaled_data', 'pca')
def transform_pca(model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
    """Centre ``X`` with the training means and project it onto the components."""
    return PCA_MODEL.predict(model, X)

@returns_tagged('scaled_data', 'pca_inverse')
def inverse_transform_pca(model: Union[Dict[str, Any], str], Z: Any) -> Dict[str, Any]:
    """Map component scores back to the original space as ``Z @ components + means``."""
    return PCA_MODEL.inverse(model, Z)
