# src/ttest_tools/config.py

"""
Package-wide defaults: confidence level, CI solver budget and report format.

Every public function takes these as keyword-argument defaults, so a caller
overrides them per call rather than by editing this module.
"""

# ---------------------------------------------------------------------------
# Interval estimation
# ---------------------------------------------------------------------------

CONF_LEVEL: float = 0.95

# ---------------------------------------------------------------------------
# Paired Cohen's d interval (noncentral-t tail matching)
# ---------------------------------------------------------------------------

CI_TOLERANCE: float = 1e-6   # objective must end below this
CI_MAX_ITER: int = 500       # root-finder iteration cap, per bound
CI_XATOL: float = 1e-10      # bound tolerance on the d scale
CI_MAX_EXPAND: int = 60      # bracket doublings before giving up

# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

P_REPORT_FLOOR: float = 0.001   # below this the report reads "p < 0.001"
REPORT_DIGITS: int = 2
