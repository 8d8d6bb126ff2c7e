from typing import Any, Dict, List, Sequence, Union
import numpy as np
from general.structures.model_artifact import load_model
from general.structures.tagged_result import InputError, is_error, ok, returns_tagged
from statml.models.registry import get_entry, model_types
from statml.models.trees_and_forests.decision_trees.cart import majority_label
VOTING_MODES = ('hard',)

def member_predictions(models: Sequence[Union[Dict[str, Any], str]], X: Any, task: str) -> tuple:
    """
    Predict ``X`` with every member model, dispatching on each model's ``type`` tag.

    Returns:
        tuple: ``(predictions, types)`` with one prediction list per member.

    Raises:
        InputError: If there are no members, a member is not a trained model of
            ``task``, or a member cannot predict ``X``.
    """
    if models is None or isinstance(models, (str, dict)) or len(models) == 0:
        raise InputError('An ensemble needs a non-empty list of trained models')
    allowed = model_types(task)
    (predictions, types) = ([], [])
    for model in models:
        model = load_model(model, allowed)
        result = get_entry(model['type'], task).predict(model, X)
        if is_error(result):
            raise InputError(result['error'])
        predictions.append(result['predictions'])
        types.append(model['type'])
    return (predictions, types)

@returns_tagged('ensemble_prediction', 'voting_classifier')
def ensemble_voting_classifier(models: Sequence[Union[Dict[str, Any], str]], X: Any, voting: str='hard') -> Dict[str, Any]:
    """
    Hard-voting ensemble of trained classifiers.

    Args:
        models: Trained classification model values (dicts or JSON text), of any
            mix of kinds.
        X: Rows to classify.
        voting (str): Only ``'hard'`` is supported.

    Returns:
        dict: ``{type: 'ensemble_prediction', name: 'voting_classifier', predictions,
        voting, model_types, n_models, n}``. Per row the most common member
        prediction wins; ties go to the label predicted by the earliest member.
    """
    if voting not in VOTING_MODES:
        raise InputError(f"voting must be one of {', '.join(VOTING_MODES)}, got '{voting}'")
    (predictions, types) = member_predictions(models, X, 'classification')
    combined = [majority_label(list(votes)) for votes in zip(*predictions)]
    return ok('ensemble_prediction', 'voting_classifier', predictions=combined, voting=voting, model_types=types, n_models=len(types), n=len(combined))

@returns_tagged('ensemble_prediction', 'voting_regressor')
def ensemble_voting_regressor(models: Sequence[Union[Dict[str, Any], str]], X: Any) -> Dict[str, Any]:
    """Arithmetic mean of the member regressors' predictions."""
    (predictions, types) = member_predictions(models, X, 'regression')
    combined: List[float] = np.mean(np.asarray(predictions, dtype=float), axis=0).tolist()
    return ok('ensemble_prediction', 'voting_regressor', predictions=combined, model_types=types, n_models=len(types), n=len(combined))
