from typing import Optional, Dict, Any, Union, Iterable
import json
from general.structures.tagged_result import InputError, to_builtin

class ModelFormatError(InputError):
    """Raised when a model value is missing, of the wrong type, or not parseable."""
    pass

def load_model(model: Union[Dict[str, Any], str], expected_types: Iterable[str]) -> Dict[str, Any]:
    """
    Accept a trained model value as a dict or as its JSON text and check its type tag.

    Parameters
    ----------
    model : Union[Dict[str, Any], str]
        Model value produced by a ``train_*`` operation, or its JSON serialization.
    expected_types : Iterable[str]
        Type tags the caller can consume.

    Returns
    -------
    Dict[str, Any]
        The model value.

    Raises
    ------
    ModelFormatError
        ``invalid model text`` for unparsable JSON, ``invalid model`` for any other mismatch.
    """
    if isinstance(model, (str, bytes)):
        try:
            model = json.loads(model)
        except (TypeError, ValueError):
            raise ModelFormatError('invalid model text')
    if not isinstance(model, dict) or 'error' in model:
        raise ModelFormatError('invalid model')
    if model.get('type') not in set(expected_types):
        raise ModelFormatError('invalid model')
    return model

def dump_model(model: Dict[str, Any], indent: Optional[int]=None) -> str:
    """Serialize a model value to JSON text."""
    return json.dumps(to_builtin(model), indent=indent)

def check_width(model: Dict[str, Any], width: int) -> None:
    """
    Ensure rows handed to a predictor are as wide as the training rows.

    Raises:
        ModelFormatError: If ``width`` differs from the model's ``p``.
    """
    if int(model.get('p', -1)) != int(width):
        raise ModelFormatError('invalid model')
