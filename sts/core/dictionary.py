# sts/core/dictionary.py
"""
Standard names of the quantities published by decomposition results.

``*_CMP`` names denote natural-space series (exponentiated for multiplicative
decompositions); ``*_LIN`` names denote the linearized (log-space) series.
Appending ``F_SUFFIX`` gives the forecast segment of the same quantity.
"""

# Natural-space components on the observed domain
Y_CMP = "y_cmp"
T_CMP = "t_cmp"
SA_CMP = "sa_cmp"
S_CMP = "s_cmp"
I_CMP = "i_cmp"
SI_CMP = "si_cmp"

# Linearized components
Y_LIN = "y_lin"
T_LIN = "t_lin"
SA_LIN = "sa_lin"
S_LIN = "s_lin"
I_LIN = "i_lin"

RESIDUALS = "residuals"

# Suffix of forecast series
F_SUFFIX = "_f"


def forecast(name: str) -> str:
    """Name of the forecast segment of a quantity."""
    return name + F_SUFFIX
