from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
import numpy as np
from general.structures.component_config import resolve_options
from general.structures.data_batch import DataBatch, as_matrix
from general.structures.model_artifact import check_width, load_model
from general.structures.tagged_result import InputError, ok

class BaseModel(ABC):
    """
    Abstract base class for the trainable model kinds.

    A model kind never holds fitted state: ``train`` returns a self-describing
    model value tagged with ``model_type`` and ``predict`` consumes such a value
    (as a dict or JSON text). The instance only carries the kind's metadata.

    Attributes
    ----------
    model_type : str
        Type tag of the model values this kind produces.
    task : str
        ``'classification'``, ``'regression'``, ``'clustering'`` or ``'decomposition'``.
    numeric_targets : bool
        Whether training targets must be real numbers.
    supervised : bool
        Whether training requires targets.
    """
    model_type: str = ''
    task: str = ''
    numeric_targets: bool = False
    supervised: bool = True

    def __init__(self, name: Optional[str]=None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    def fit(self, batch: DataBatch, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Compute the fitted parameters.

        Parameters
        ----------
        batch : DataBatch
            Validated training matrix and targets
        options : Dict[str, Any]
            Resolved options

        Returns
        -------
        Dict[str, Any]
            Model payload (everything except ``type``, ``n`` and ``p``)
        """
        pass

    @abstractmethod
    def predict_values(self, model: Dict[str, Any], X: np.ndarray) -> List[Any]:
        """
        Predict one value per row of a validated matrix.

        Parameters
        ----------
        model : Dict[str, Any]
            Model value of this kind
        X : np.ndarray
            Matrix whose width equals ``model['p']``

        Returns
        -------
        List[Any]
            Predictions as plain Python values
        """
        pass

    def train(self, X: Any, y: Optional[Any]=None, options: Optional[Dict[str, Any]]=None) -> Dict[str, Any]:
        """Validate the inputs, resolve options and build the tagged model value."""
        opts = resolve_options(self.model_type, options)
        batch = DataBatch(data=X, labels=y if self.supervised else None, numeric_labels=self.numeric_targets)
        if self.supervised and (not batch.is_labeled()):
            raise InputError(f'{self.name} requires target values')
        payload = self.fit(batch, opts)
        return ok(self.model_type, **payload, n=batch.n_samples, p=batch.n_features)

    def load(self, model: Union[Dict[str, Any], str], X: Any) -> tuple:
        """Parse the model value and validate ``X`` against its width."""
        model = load_model(model, [self.model_type])
        X = as_matrix(X)
        check_width(model, X.shape[1])
        return (model, X)

    def predict(self, model: Union[Dict[str, Any], str], X: Any) -> Dict[str, Any]:
        """Tagged prediction ``{type: 'prediction', name, predictions, n}``."""
        (model, X) = self.load(model, X)
        return ok('prediction', self.model_type, predictions=self.predict_values(model, X), n=X.shape[0])
