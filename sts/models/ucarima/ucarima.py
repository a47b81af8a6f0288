# sts/models/ucarima/ucarima.py
"""
Unobserved components ARIMA (UCARIMA) models.

A UCARIMA model writes a series as the sum of independent ARIMA components.
Its reduced model is the single ARIMA model of the sum. Normalizing the model
expresses every component variance in units of the reduced innovation
variance, which is the convention used by Wiener-Kolmogorov estimation.
"""

import logging
import threading
from typing import List, Optional, Sequence

from sts.core.exceptions import raise_parameter_error, warn_model
from sts.models.ucarima.arima import ArimaModel

logger = logging.getLogger("sts.models.ucarima.ucarima")


class UcarimaModel:
    """Sum of independent ARIMA components.

    Args:
        components: Component models
        names: Component names (defaults to ``cmp0, cmp1, ...``)
    """

    def __init__(self, components: Sequence[ArimaModel], names: Optional[Sequence[str]] = None) -> None:
        components = list(components)
        if names is None:
            names = [f"cmp{i}" for i in range(len(components))]
        names = list(names)
        if len(names) != len(components):
            raise_parameter_error(
                "Each component needs exactly one name",
                param_name="names",
                param_value=len(names),
                constraint=f"{len(components)} names"
            )
        for component in components:
            if not isinstance(component, ArimaModel):
                raise TypeError(f"components must be ArimaModel instances, got {type(component).__name__}")
        self._components: List[ArimaModel] = components
        self._names: List[str] = names
        self._lock = threading.Lock()
        self._normalized = False

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def component_count(self) -> int:
        return len(self._components)

    @property
    def is_normalized(self) -> bool:
        return self._normalized

    def component(self, index: int) -> ArimaModel:
        return self._components[index]

    def component_by_name(self, name: str) -> Optional[ArimaModel]:
        if name not in self._names:
            return None
        return self._components[self._names.index(name)]

    def reduced_model(self) -> ArimaModel:
        """ARIMA model of the sum of the components."""
        reduced = ArimaModel.null()
        for component in self._components:
            reduced = reduced.plus(component)
        return reduced

    def normalize(self) -> float:
        """Divide every component variance by the reduced innovation variance.

        Returns:
            float: The reduced innovation variance before normalization. A
                degenerate model (zero reduced variance) is left unchanged
                and 0.0 is returned.
        """
        with self._lock:
            var = self.reduced_model().var
            if var <= 0.0:
                warn_model(
                    "Reduced model has a zero innovation variance",
                    model_type="UCARIMA",
                    issue="degenerate reduced model",
                    value=var
                )
                return 0.0
            self._components = [c.scaled(var) for c in self._components]
            self._normalized = True
        logger.debug(f"Normalized UCARIMA model (reduced variance {var:.6g})")
        return var

    def __repr__(self) -> str:
        parts = ", ".join(f"{n}={c!r}" for n, c in zip(self._names, self._components))
        return f"UcarimaModel({parts})"
