# sts/models/structural/bsm.py
"""
Basic structural model in state-space form.

The state vector stacks the blocks of the present components in a fixed order:

    noise (1) | cycle (2) | level (1) | slope (1) | seasonal (frequency - 1)

The irregular is carried as a state, so the measurement equation has no error
term: ``y_t = Z alpha_t``. The transition is ``alpha_{t+1} = T alpha_t + eta_t``
with ``Var(eta_t) = Q``. Non-stationary blocks (level, slope, seasonal) have a
diffuse initial distribution; the noise and the cycle start from their
stationary distribution.
"""

import logging
from typing import Dict, List, Tuple

import numpy as np

from sts.core.config import get_config
from sts.core.exceptions import ModelSpecificationError
from sts.core.types import COMPONENT_ORDER, StructuralComponent
from sts.core.validation import validate_frequency
from sts.models.structural.specification import BsmParameters, ModelSpecification
from sts.models.ucarima.arima import ArimaModel, polynomial_acgf
from sts.models.ucarima.ucarima import UcarimaModel

logger = logging.getLogger("sts.models.structural.bsm")

# Names of the components of the reduced (UCARIMA) form
TREND, CYCLE, SEASONAL, IRREGULAR = "trend", "cycle", "seasonal", "irregular"


class BasicStructuralModel:
    """State-space form of a basic structural model.

    Args:
        spec: Components of the model
        params: Hyper-parameters
        frequency: Number of periods per year of the modelled series

    Raises:
        ModelSpecificationError: If a seasonal component is requested for
            yearly data
    """

    def __init__(self, spec: ModelSpecification, params: BsmParameters, frequency: int) -> None:
        frequency = validate_frequency(frequency)
        if spec.seasonal and frequency == 1:
            raise ModelSpecificationError(
                "A seasonal component requires a frequency greater than 1",
                model_type="BSM",
                parameter="seasonal",
                valid_options=[2, 3, 4, 6, 12]
            )
        self._spec = spec
        self._params = params
        self._frequency = frequency
        self._blocks = self._layout()

    def _block_size(self, component: StructuralComponent) -> int:
        if component is StructuralComponent.CYCLE:
            return 2
        if component is StructuralComponent.SEASONAL:
            return self._frequency - 1
        return 1

    def _layout(self) -> Dict[StructuralComponent, Tuple[int, int]]:
        blocks = {}
        offset = 0
        for component in self._spec.components:
            size = self._block_size(component)
            blocks[component] = (offset, size)
            offset += size
        return blocks

    @property
    def spec(self) -> ModelSpecification:
        return self._spec

    @property
    def params(self) -> BsmParameters:
        return self._params

    @property
    def frequency(self) -> int:
        return self._frequency

    @property
    def state_dim(self) -> int:
        return sum(size for _, size in self._blocks.values())

    def has(self, component: StructuralComponent) -> bool:
        return self._spec.has(component)

    def block(self, component: StructuralComponent) -> Tuple[int, int]:
        """(offset, size) of a component block in the state vector."""
        return self._blocks[component]

    def cmp_positions(self) -> List[int]:
        """State positions of the present components, in extraction order."""
        return [self._blocks[c][0] for c in COMPONENT_ORDER if c in self._blocks]

    def with_params(self, params: BsmParameters) -> "BasicStructuralModel":
        return BasicStructuralModel(self._spec, params, self._frequency)

    # State-space matrices

    def design(self) -> np.ndarray:
        """Measurement vector Z."""
        z = np.zeros(self.state_dim)
        for component, (offset, _) in self._blocks.items():
            if component is not StructuralComponent.SLOPE:
                z[offset] = 1.0
        return z

    def transition(self) -> np.ndarray:
        """Transition matrix T."""
        m = self.state_dim
        t = np.zeros((m, m))
        params = self._params
        for component, (offset, size) in self._blocks.items():
            if component is StructuralComponent.CYCLE:
                rho, lam = params.cycle_damping, params.cycle_frequency
                c, s = rho * np.cos(lam), rho * np.sin(lam)
                t[offset:offset + 2, offset:offset + 2] = [[c, s], [-s, c]]
            elif component is StructuralComponent.LEVEL:
                t[offset, offset] = 1.0
                if StructuralComponent.SLOPE in self._blocks:
                    t[offset, self._blocks[StructuralComponent.SLOPE][0]] = 1.0
            elif component is StructuralComponent.SLOPE:
                t[offset, offset] = 1.0
            elif component is StructuralComponent.SEASONAL:
                t[offset, offset:offset + size] = -1.0
                for j in range(1, size):
                    t[offset + j, offset + j - 1] = 1.0
        return t

    def state_cov(self) -> np.ndarray:
        """Covariance Q of the state disturbances."""
        m = self.state_dim
        q = np.zeros((m, m))
        for component, (offset, size) in self._blocks.items():
            var = self._params.variance(component)
            if component is StructuralComponent.CYCLE:
                q[offset, offset] = q[offset + 1, offset + 1] = var
            else:
                q[offset, offset] = var
        return q

    def selection(self) -> np.ndarray:
        """Selection matrix R (the disturbances hit the state directly)."""
        return np.eye(self.state_dim)

    def diffuse_mask(self) -> np.ndarray:
        """Boolean mask of the diffuse (non-stationary) state elements."""
        mask = np.zeros(self.state_dim, dtype=bool)
        for component, (offset, size) in self._blocks.items():
            if component in (StructuralComponent.LEVEL, StructuralComponent.SLOPE, StructuralComponent.SEASONAL):
                mask[offset:offset + size] = True
        return mask

    @property
    def diffuse_dim(self) -> int:
        return int(self.diffuse_mask().sum())

    def initial_state(self) -> Tuple[np.ndarray, np.ndarray]:
        """Initial state mean a0 and covariance P0.

        Diffuse elements get the variance ``numerical.diffuse_variance``.
        """
        m = self.state_dim
        a0 = np.zeros(m)
        p0 = np.zeros((m, m))
        kappa = get_config("numerical", "diffuse_variance", 1e7)
        for component, (offset, size) in self._blocks.items():
            if component is StructuralComponent.NOISE:
                p0[offset, offset] = self._params.noise_var
            elif component is StructuralComponent.CYCLE:
                rho = self._params.cycle_damping
                var = self._params.cycle_var / (1.0 - rho * rho)
                p0[offset, offset] = p0[offset + 1, offset + 1] = var
            else:
                p0[offset:offset + size, offset:offset + size] = kappa * np.eye(size)
        return a0, p0

    # Reduced form

    def compute_reduced_model(self) -> UcarimaModel:
        """UCARIMA representation of the model.

        One ARIMA component is produced for each present block: trend (level
        with its optional slope), cycle, seasonal and irregular.
        """
        params = self._params
        components: List[ArimaModel] = []
        names: List[str] = []

        if self._spec.level:
            if self._spec.slope:
                # (1-B)^2 mu_t = (1-B) eta_{t-1} + zeta_{t-2}
                acgf = params.level_var * polynomial_acgf(np.array([1.0, -1.0]))
                acgf[0] += params.slope_var
                trend = ArimaModel.from_acgf([1.0, -2.0, 1.0], acgf)
            else:
                trend = ArimaModel([1.0, -1.0], [1.0], params.level_var)
            components.append(trend)
            names.append(TREND)

        if self._spec.cycle:
            rho, lam = params.cycle_damping, params.cycle_frequency
            ar = [1.0, -2.0 * rho * np.cos(lam), rho * rho]
            acgf = params.cycle_var * np.array([1.0 + rho * rho, -rho * np.cos(lam)])
            components.append(ArimaModel.from_acgf(ar, acgf))
            names.append(CYCLE)

        if self._spec.seasonal:
            components.append(ArimaModel(np.ones(self._frequency), [1.0], params.seasonal_var))
            names.append(SEASONAL)

        if self._spec.noise:
            components.append(ArimaModel([1.0], [1.0], params.noise_var))
            names.append(IRREGULAR)

        logger.debug(f"Computed reduced form of {self._spec} with components {names}")
        return UcarimaModel(components, names)

    def __repr__(self) -> str:
        return f"BasicStructuralModel({self._spec}, frequency={self._frequency})"
