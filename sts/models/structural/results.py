# sts/models/structural/results.py
"""
Decomposition results of basic structural models.

``StsResults`` turns a fitted structural model into a consistent set of
component series. At construction the smoother is run once over the observed
series extended by a forecast horizon of missing values. The smoothed states
of the present components become series over the extended domain. Absent
components are identically zero. The aggregates are then reconciled:

    trend     = level + cycle        (the cycle alone without a level)
    total     = trend + seasonal + irregular, replaced by y where y is observed
    sa        = total - seasonal
    forecasts = total restricted to the periods after y

For multiplicative decompositions every series is in log space; the natural
space series published under the ``*_cmp`` names are exponentiated after the
reconciliation.

Quantities are resolved by name through a registry of extraction functions
shared by every result (``StsResults.mapper``) and, as a fallback, through the
metadata container of the result, which holds the raw components under
``model``. The reduced (UCARIMA) form of the model and its Wiener-Kolmogorov
estimators are computed on first access and cached.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

import numpy as np

from sts.core import dictionary as names
from sts.core.base import SaResults
from sts.core.config import get_config
from sts.core.exceptions import (
    ConfigurationError, NameNotFoundError, TypeMismatchError, raise_domain_mismatch_error
)
from sts.core.information import SEPARATOR, InformationSet
from sts.core.mapper import InformationMapper, Mapper
from sts.core.results import SeriesDecomposition
from sts.core.types import (
    COMPONENT_ORDER, ComponentInformation, ComponentType, DecompositionMode,
    HasComponentPositions, HasSmooth, StructuralComponent
)
from sts.core.validation import validate_non_negative_integer
from sts.models.structural.smoother import Smoother
from sts.models.ucarima.ucarima import UcarimaModel
from sts.models.ucarima.wiener_kolmogorov import WienerKolmogorovEstimators
from sts.timeseries.data import TsData
from sts.timeseries.period import TsDomain

logger = logging.getLogger("sts.models.structural.results")

T = TypeVar('T')

# Names of the metadata container
MODEL = "model"
SERIES = "series"
NOISE = StructuralComponent.NOISE.value
CYCLE = StructuralComponent.CYCLE.value
LEVEL = StructuralComponent.LEVEL.value
SLOPE = StructuralComponent.SLOPE.value
SEASONAL = StructuralComponent.SEASONAL.value


class StsResults(SaResults):
    """Decomposition of a series by a fitted basic structural model.

    Args:
        y: Observed series the model was fitted to (in log space for
            multiplicative decompositions)
        monitor: Estimation monitor holding the fitted model
            (``get_result``, ``get_likelihood``, ``likelihood_function``,
            ``max_likelihood_function``)
        mul: Whether the decomposition is multiplicative
        x: Regression variables of the model, if any
        mapper: Registry of named quantities (defaults to the registry shared
            by every ``StsResults``)
        smoother: Smoothing engine (a default ``Smoother`` when omitted)
        forecast_horizon: Number of forecast periods (defaults to
            ``decomposition.forecast_horizon``, or the frequency of y)

    Raises:
        ConfigurationError: If the state positions declared by the model do
            not match its components
    """

    # Registry shared by every result
    mapper: InformationMapper = InformationMapper()

    def __init__(self,
                 y: TsData,
                 monitor: Any,
                 mul: bool = False,
                 x: Any = None,
                 mapper: Optional[InformationMapper] = None,
                 smoother: Optional[HasSmooth] = None,
                 forecast_horizon: Optional[int] = None) -> None:
        if not isinstance(y, TsData):
            raise TypeError(f"y must be a TsData, got {type(y).__name__}")
        self._y = y
        self._monitor = monitor
        self._mul = bool(mul)
        self._x = x
        self._mapper = mapper if mapper is not None else StsResults.mapper
        self._info = InformationSet()

        self._reduced: Optional[UcarimaModel] = None
        self._err_factor = 0.0
        self._reduced_lock = threading.Lock()
        self._wk: Optional[WienerKolmogorovEstimators] = None
        self._wk_lock = threading.Lock()

        if forecast_horizon is None:
            forecast_horizon = get_config("decomposition", "forecast_horizon", None)
        if forecast_horizon is None:
            forecast_horizon = y.frequency
        self._horizon = validate_non_negative_integer(forecast_horizon, "forecast_horizon")

        model = monitor.get_result()
        if not isinstance(model, HasComponentPositions):
            raise TypeError(f"monitor must provide a structural model, got {type(model).__name__}")
        self._assemble(model, smoother if smoother is not None else Smoother())

    def _assemble(self, model: HasComponentPositions, smoother: HasSmooth) -> None:
        y = self._y
        present = [c for c in COMPONENT_ORDER if model.has(c)]
        positions = list(model.cmp_positions())
        if len(positions) != len(present):
            raise ConfigurationError(
                "State positions do not match the components of the model",
                setting="cmp_positions",
                value=positions,
                issue=f"{len(positions)} positions for {len(present)} components "
                      f"({', '.join(c.value for c in present)})"
            )

        srslts = smoother.smooth(y.extend(0, self._horizon), model)
        extracted: Dict[StructuralComponent, TsData] = {}
        for component, position in zip(present, positions):
            extracted[component] = TsData(y.start, srslts.component(position))

        minfo = self._info.subset(MODEL)
        for component in COMPONENT_ORDER:
            if component in extracted:
                minfo.add(component.value, extracted[component])
        minfo.add(SERIES, y)

        # None marks an absent (identically zero) series
        noise = extracted.get(StructuralComponent.NOISE)
        cycle = extracted.get(StructuralComponent.CYCLE)
        level = extracted.get(StructuralComponent.LEVEL)
        seasonal = extracted.get(StructuralComponent.SEASONAL)

        self._i = noise
        self._c = cycle
        self._s = seasonal
        self._t = TsData.add(level, cycle) if level is not None else cycle

        total = TsData.add(TsData.add(self._t, seasonal), noise)
        if total is None:
            total = TsData.zeros(y.domain.extend(0, self._horizon))
        self._total = total.update(y)
        self._sa = TsData.subtract(self._total, seasonal)
        self._yf = self._total.drop(y.length, 0)

        logger.debug(
            f"Decomposed series {y.domain} with components "
            f"[{', '.join(c.value for c in present)}], horizon {self._horizon}, "
            f"{'multiplicative' if self._mul else 'additive'}"
        )

    # Domains and raw series

    @property
    def y(self) -> TsData:
        return self._y

    @property
    def y_forecast(self) -> TsData:
        return self._yf

    @property
    def domain(self) -> TsDomain:
        """Observed domain."""
        return self._y.domain

    @property
    def forecast_domain(self) -> TsDomain:
        return self._yf.domain

    @property
    def forecast_horizon(self) -> int:
        return self._horizon

    @property
    def is_multiplicative(self) -> bool:
        return self._mul

    def _fit(self, series: Optional[TsData], domain: TsDomain) -> TsData:
        if series is None:
            if domain.frequency != self._y.frequency:
                raise_domain_mismatch_error(
                    "Cannot fit a series to a domain of another frequency",
                    source_domain=self._y.domain,
                    requested_domain=domain,
                    issue="frequency mismatch"
                )
            return TsData.zeros(domain)
        return series.fit_to_domain(domain)

    def _series(self, component: ComponentType) -> Optional[TsData]:
        if component is ComponentType.SERIES:
            return self._total
        if component is ComponentType.TREND:
            return self._t
        if component is ComponentType.SEASONAL:
            return self._s
        if component is ComponentType.SEASONALLY_ADJUSTED:
            return self._sa
        if component is ComponentType.IRREGULAR:
            return self._i
        raise ValueError(f"No series for component type {component.name}")

    def component_series(self, component: ComponentType,
                         domain: Optional[TsDomain] = None,
                         linear: bool = True) -> TsData:
        """A reconciled series fitted to a domain.

        Args:
            component: Kind of series (SERIES is the reconciled total)
            domain: Requested domain (the observed domain by default)
            linear: Whether the log-space series is returned for
                multiplicative decompositions

        Returns:
            TsData: The series on the requested domain

        Raises:
            DomainMismatchError: If the series cannot be represented on domain
        """
        if domain is None:
            domain = self._y.domain
        data = self._fit(self._series(component), domain)
        return data if linear or not self._mul else data.exp()

    def get_trend(self, domain: Optional[TsDomain] = None) -> TsData:
        return self.component_series(ComponentType.TREND, domain)

    def get_seasonal(self, domain: Optional[TsDomain] = None) -> TsData:
        return self.component_series(ComponentType.SEASONAL, domain)

    def get_irregular(self, domain: Optional[TsDomain] = None) -> TsData:
        return self.component_series(ComponentType.IRREGULAR, domain)

    def get_sa(self, domain: Optional[TsDomain] = None) -> TsData:
        return self.component_series(ComponentType.SEASONALLY_ADJUSTED, domain)

    def get_cycle(self, domain: Optional[TsDomain] = None) -> TsData:
        return self._fit(self._c, domain if domain is not None else self._y.domain)

    def get_x(self) -> Any:
        """Regression variables of the model."""
        return self._x

    # Decompositions

    def _decomposition(self, natural: bool) -> SeriesDecomposition:
        mode = DecompositionMode.MULTIPLICATIVE if natural else DecompositionMode.ADDITIVE
        transform = (lambda s: s.exp()) if natural else (lambda s: s)
        decomposition = SeriesDecomposition(model_name=str(self.get_model()), mode=mode)
        dom, fdom = self._y.domain, self._yf.domain
        decomposition.add(transform(self._y), ComponentType.SERIES)
        decomposition.add(transform(self._yf), ComponentType.SERIES, ComponentInformation.FORECAST)
        for component in (ComponentType.SEASONALLY_ADJUSTED, ComponentType.TREND,
                          ComponentType.SEASONAL, ComponentType.IRREGULAR):
            series = self._series(component)
            decomposition.add(transform(self._fit(series, dom)), component)
            decomposition.add(transform(self._fit(series, fdom)), component, ComponentInformation.FORECAST)
        return decomposition

    def get_components(self) -> SeriesDecomposition:
        """Additive decomposition of the (possibly log-transformed) series."""
        return self._decomposition(False)

    def get_series_decomposition(self) -> SeriesDecomposition:
        """Decomposition in the space of the original data.

        Multiplicative decompositions are exponentiated.
        """
        return self._decomposition(self._mul)

    # Reduced model

    def _ensure_reduced(self) -> UcarimaModel:
        reduced = self._reduced
        if reduced is None:
            with self._reduced_lock:
                reduced = self._reduced
                if reduced is None:
                    reduced = self.get_model().compute_reduced_model()
                    self._err_factor = reduced.normalize()
                    self._reduced = reduced
                    logger.debug(f"Reduced model normalized with factor {self._err_factor:.6g}")
        return reduced

    def get_ucarima_model(self) -> UcarimaModel:
        """Normalized reduced (UCARIMA) form of the model, computed once."""
        return self._ensure_reduced()

    def get_residuals_scaling_factor(self) -> float:
        """Square root of the normalization factor of the reduced model."""
        self._ensure_reduced()
        return float(np.sqrt(self._err_factor))

    def get_wiener_kolmogorov_estimators(self) -> WienerKolmogorovEstimators:
        wk = self._wk
        if wk is None:
            with self._wk_lock:
                wk = self._wk
                if wk is None:
                    wk = WienerKolmogorovEstimators(self.get_ucarima_model())
                    self._wk = wk
        return wk

    # Monitor

    def get_model(self) -> Any:
        """The fitted structural model."""
        return self._monitor.get_result()

    def get_likelihood(self) -> Any:
        return self._monitor.get_likelihood()

    def get_residuals(self) -> TsData:
        """Standardized one-step-ahead residuals, aligned on the end of y."""
        residuals = self._monitor.get_likelihood().residuals
        values = residuals.values if isinstance(residuals, TsData) else np.asarray(residuals, dtype=np.float64)
        domain = self._y.domain
        return TsData(domain.start + (domain.length - len(values)), values)

    def likelihood_function(self) -> Any:
        return self._monitor.likelihood_function()

    def max_likelihood_function(self) -> Any:
        return self._monitor.max_likelihood_function()

    # Named quantities

    def get_information(self) -> InformationSet:
        return self._info

    def _lookup(self, name: str, expected_type: Type[Any]) -> Any:
        if SEPARATOR not in name:
            return self._info.deep_search(name, expected_type)
        return self._info.search(name, expected_type)

    def contains(self, name: str) -> bool:
        """Whether name resolves in the registry or in the metadata container."""
        with self._mapper.lock:
            if self._mapper.contains(name):
                return True
            return self._lookup(name, object) is not None

    def get_data(self, name: str, expected_type: Type[T] = object) -> T:
        """Resolve a quantity by name.

        Registered names take precedence over the metadata container. Plain
        names are searched in every sub-container of the metadata; dotted
        names are resolved as exact paths.

        Raises:
            NameNotFoundError: If nothing resolves under name
            TypeMismatchError: If the value is not an instance of expected_type
        """
        with self._mapper.lock:
            if self._mapper.contains(name):
                return self._mapper.get_data(self, name, expected_type)
            value = self._lookup(name, expected_type)
            if value is not None:
                return value
            # Only an item of another type resolves under name
            other = self._lookup(name, object)
        if other is None:
            raise NameNotFoundError(
                f"Unknown quantity '{name}'",
                name=name,
                searched=["registry", "metadata"]
            )
        raise TypeMismatchError(
            f"Value of '{name}' is not of the requested type",
            name=name,
            expected_type=expected_type,
            actual_type=type(other)
        )

    def get_dictionary(self) -> Dict[str, type]:
        """Registered names and metadata paths with the type of their values."""
        dictionary: Dict[str, type] = {}
        self._mapper.fill_dictionary(None, dictionary)
        for path, value in self._info.walk():
            dictionary.setdefault(path, type(value))
        return dictionary

    def get_ts_data_dictionary(self) -> List[str]:
        """Paths of the series held in the metadata container."""
        return self._info.get_dictionary(TsData)

    @classmethod
    def add_mapping(cls, name: str, mapping: Any) -> None:
        """Register an extraction in the shared registry.

        Args:
            name: Name of the quantity
            mapping: ``Mapper`` or plain callable taking a result
        """
        with cls.mapper.lock:
            cls.mapper.add(name, mapping)

    def __repr__(self) -> str:
        return (f"StsResults(domain={self._y.domain}, horizon={self._horizon}, "
                f"{'multiplicative' if self._mul else 'additive'})")


# Registry of the standard quantities

def _natural(source: StsResults, data: TsData) -> TsData:
    return data.exp() if source.is_multiplicative else data


def _register_component(base: str, lin: str, component: ComponentType) -> None:
    StsResults.add_mapping(base, Mapper(TsData, lambda s: _natural(
        s, s.component_series(component, s.domain))))
    StsResults.add_mapping(names.forecast(base), Mapper(TsData, lambda s: _natural(
        s, s.component_series(component, s.forecast_domain))))
    StsResults.add_mapping(lin, Mapper(TsData, lambda s: s.component_series(component, s.domain)))
    StsResults.add_mapping(names.forecast(lin), Mapper(TsData, lambda s: s.component_series(
        component, s.forecast_domain)))


StsResults.add_mapping(names.Y_CMP, Mapper(TsData, lambda s: _natural(s, s.y)))
StsResults.add_mapping(names.forecast(names.Y_CMP), Mapper(TsData, lambda s: _natural(s, s.y_forecast)))
StsResults.add_mapping(names.Y_LIN, Mapper(TsData, lambda s: s.y))
StsResults.add_mapping(names.forecast(names.Y_LIN), Mapper(TsData, lambda s: s.y_forecast))
_register_component(names.T_CMP, names.T_LIN, ComponentType.TREND)
_register_component(names.SA_CMP, names.SA_LIN, ComponentType.SEASONALLY_ADJUSTED)
_register_component(names.S_CMP, names.S_LIN, ComponentType.SEASONAL)
_register_component(names.I_CMP, names.I_LIN, ComponentType.IRREGULAR)
StsResults.add_mapping(names.SI_CMP, Mapper(TsData, lambda s: _natural(
    s, s.get_seasonal() + s.get_irregular())))
StsResults.add_mapping(names.RESIDUALS, Mapper(TsData, lambda s: s.get_residuals()))
