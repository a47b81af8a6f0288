'''
Result containers for the STS Toolbox.

This module provides dataclass-based result objects. ``ModelResult`` carries
the metadata shared by every result (name, creation time, free-form metadata)
and its textual summary. ``SeriesDecomposition`` stores the component series
of a decomposition, keyed by the kind of component and by the part of the
component (value, standard deviation, forecast...), and exports them as a
pandas DataFrame or a matplotlib figure.
'''

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from sts.core.types import ComponentInformation, ComponentType, DecompositionMode
from sts.timeseries.data import TsData

logger = logging.getLogger("sts.core.results")

# Column names used when exporting a decomposition
_COLUMN_NAMES: Dict[ComponentType, str] = {
    ComponentType.SERIES: "series",
    ComponentType.TREND: "trend",
    ComponentType.SEASONAL: "seasonal",
    ComponentType.SEASONALLY_ADJUSTED: "sa",
    ComponentType.IRREGULAR: "irregular",
    ComponentType.UNDEFINED: "undefined",
}

_INFO_SUFFIXES: Dict[ComponentInformation, str] = {
    ComponentInformation.VALUE: "",
    ComponentInformation.STDEV: "_stdev",
    ComponentInformation.FORECAST: "_f",
    ComponentInformation.FORECAST_STDEV: "_f_stdev",
}


@dataclass
class ModelResult:
    """Base class for all model results.

    Attributes:
        model_name: Name of the model that generated the results
        creation_time: Timestamp when the result was created
        metadata: Additional metadata about the result
    """

    model_name: str
    creation_time: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate result object after initialization."""
        if not isinstance(self.metadata, dict):
            self.metadata = dict(self.metadata)

    def summary(self) -> str:
        """Generate a text summary of the result.

        Returns:
            str: A formatted string containing the result summary
        """
        header = f"Model: {self.model_name}\n"
        header += f"Created: {self.creation_time.strftime('%Y-%m-%d %H:%M:%S')}\n"
        if self.metadata:
            header += "Metadata:\n"
            for key, value in self.metadata.items():
                header += f"  {key}: {value}\n"
        return header + "\n"

    def __str__(self) -> str:
        return self.summary()


@dataclass
class SeriesDecomposition(ModelResult):
    """Component series of a decomposition.

    Attributes:
        mode: How the components combine into the series
        series: Component series keyed by (component type, information)
    """

    mode: DecompositionMode = DecompositionMode.ADDITIVE
    series: Dict[Tuple[ComponentType, ComponentInformation], TsData] = field(default_factory=dict)

    def add(self, data: Optional[TsData], component: ComponentType,
            info: ComponentInformation = ComponentInformation.VALUE) -> None:
        """Store a component series; None values are ignored."""
        if data is None:
            return
        if not isinstance(data, TsData):
            raise TypeError(f"data must be a TsData, got {type(data).__name__}")
        self.series[(component, info)] = data

    def get_series(self, component: ComponentType,
                   info: ComponentInformation = ComponentInformation.VALUE) -> Optional[TsData]:
        """Stored series, or None when the decomposition lacks it."""
        return self.series.get((component, info))

    def components(self) -> List[ComponentType]:
        """Component types with a stored value series."""
        return [c for (c, info) in self.series if info is ComponentInformation.VALUE]

    def to_dataframe(self, include_forecasts: bool = True) -> pd.DataFrame:
        """Convert the decomposition to a pandas DataFrame.

        Args:
            include_forecasts: Whether the forecast series are exported as
                separate columns

        Returns:
            pd.DataFrame: One column per stored series, aligned on periods
        """
        columns = {}
        for (component, info), data in self.series.items():
            if not include_forecasts and info in (ComponentInformation.FORECAST,
                                                  ComponentInformation.FORECAST_STDEV):
                continue
            name = _COLUMN_NAMES[component] + _INFO_SUFFIXES[info]
            columns[name] = data.to_series(name)
        if not columns:
            return pd.DataFrame()
        return pd.concat(columns.values(), axis=1)

    def summary(self) -> str:
        base_summary = super().summary()
        text = f"Decomposition mode: {self.mode.name.lower()}\n"
        for (component, info), data in self.series.items():
            text += f"  {_COLUMN_NAMES[component] + _INFO_SUFFIXES[info]}: {data.domain}\n"
        return base_summary + text

    def plot(self, include_forecasts: bool = True, **kwargs: Any) -> Any:
        """Plot the components, one panel per component type.

        Args:
            include_forecasts: Whether forecasts are drawn after the values
            **kwargs: Additional keyword arguments passed to ``plt.subplots``

        Returns:
            Any: Array of matplotlib axes
        """
        import matplotlib.pyplot as plt

        components = self.components()
        if not components:
            raise ValueError("Nothing to plot: the decomposition is empty")
        kwargs.setdefault("figsize", (10, 2.5 * len(components)))
        fig, axes = plt.subplots(len(components), 1, sharex=True, squeeze=False, **kwargs)
        for ax, component in zip(axes[:, 0], components):
            name = _COLUMN_NAMES[component]
            values = self.get_series(component)
            ax.plot(range(values.length), values.values, label=name)
            forecasts = self.get_series(component, ComponentInformation.FORECAST)
            if include_forecasts and forecasts is not None and forecasts.length > 0:
                offset = forecasts.start - values.start
                ax.plot(range(offset, offset + forecasts.length), forecasts.values,
                        linestyle="--", label=f"{name} (forecast)")
            ax.set_ylabel(name)
            ax.legend(loc="best")
        axes[-1, 0].set_xlabel("Period")
        fig.suptitle(f"Decomposition of {self.model_name}")
        return axes[:, 0]
