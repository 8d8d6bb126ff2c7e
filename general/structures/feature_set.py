from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union
import numpy as np
import pandas as pd
from general.structures.tagged_result import InputError
from general.structures.data_batch import clean_sequence

@dataclass
class TabularData:
    """
    Read-only view of a tabular value handed over by a dataframe layer.

    The shape mirrors ``{columns, data, n_rows, n_cols}`` where ``data`` is a list
    of row records. Columns are extracted by name as plain sequences; the
    underlying records are never modified.

    Attributes
    ----------
    columns : List[str]
        Column names in order.
    data : List[Dict[str, Any]]
        Row records mapping column name to value.
    metadata : Dict[str, Any]
        Additional information about the table.
    """
    columns: List[str]
    data: List[Dict[str, Any]]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.columns, list):
            raise InputError('columns must be a list')
        if len(set(self.columns)) != len(self.columns):
            raise InputError('Column names must be unique')
        for (i, row) in enumerate(self.data):
            if not isinstance(row, dict):
                raise InputError(f'Row {i} must be a mapping of column name to value')

    @property
    def n_rows(self) -> int:
        return len(self.data)

    @property
    def n_cols(self) -> int:
        return len(self.columns)

    @classmethod
    def from_value(cls, value: Union['TabularData', Dict[str, Any], pd.DataFrame]) -> 'TabularData':
        """
        Accept a tabular dict, a pandas DataFrame or an existing ``TabularData``.

        Raises:
            InputError: If the value is none of these or ``n_rows``/``n_cols`` disagree with the content.
        """
        if isinstance(value, TabularData):
            return value
        if isinstance(value, pd.DataFrame):
            return cls.from_dataframe(value)
        if isinstance(value, dict) and 'columns' in value and 'data' in value:
            table = cls(columns=list(value['columns']), data=list(value['data']))
            if 'n_rows' in value and value['n_rows'] != table.n_rows:
                raise InputError(f"n_rows ({value['n_rows']}) does not match the number of records ({table.n_rows})")
            if 'n_cols' in value and value['n_cols'] != table.n_cols:
                raise InputError(f"n_cols ({value['n_cols']}) does not match the number of columns ({table.n_cols})")
            return table
        raise InputError('Expected a tabular value with columns and data')

    @classmethod
    def from_dataframe(cls, frame: pd.DataFrame) -> 'TabularData':
        """Build a tabular value from a DataFrame; missing cells become None."""
        columns = [str(c) for c in frame.columns]
        records = frame.astype(object).where(pd.notna(frame), None).to_dict(orient='records')
        return cls(columns=columns, data=[{str(k): v for (k, v) in row.items()} for row in records])

    def to_dataframe(self) -> pd.DataFrame:
        """Return the records as a DataFrame with the declared column order."""
        return pd.DataFrame(self.data, columns=self.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {'columns': list(self.columns), 'data': [dict(row) for row in self.data], 'n_rows': self.n_rows, 'n_cols': self.n_cols}

    def _check_column(self, name: str) -> None:
        if name not in self.columns:
            raise InputError(f"Column '{name}' not found")

    def column(self, name: str, clean: bool=True) -> Union[np.ndarray, List[Any]]:
        """
        Extract one column.

        Parameters
        ----------
        name : str
            Column name.
        clean : bool
            When True, non-numeric and non-finite cells are dropped and a float array is returned;
            otherwise the raw values are returned as a list.
        """
        self._check_column(name)
        raw = [row.get(name) for row in self.data]
        return clean_sequence(raw) if clean else raw

    def matrix(self, names: Optional[List[str]]=None) -> np.ndarray:
        """
        Extract several columns as a row-major float matrix, dropping rows with a missing or non-numeric cell.
        """
        names = list(self.columns) if names is None else list(names)
        if len(names) == 0:
            raise InputError('At least one column is required')
        for name in names:
            self._check_column(name)
        rows = []
        for row in self.data:
            values = [row.get(name) for name in names]
            cleaned = clean_sequence(values)
            if len(cleaned) == len(names):
                rows.append(cleaned)
        if not rows:
            raise InputError('No complete numeric rows for the requested columns')
        return np.vstack(rows)

def select_column(data: Any, column: Optional[str]=None) -> Any:
    """
    Pass a plain sequence through, or pull the raw values of ``column`` out of a tabular value.

    Raises:
        InputError: If ``column`` is given and ``data`` is not a tabular value holding it.
    """
    if column is None:
        return data
    return TabularData.from_value(data).column(column, clean=False)
