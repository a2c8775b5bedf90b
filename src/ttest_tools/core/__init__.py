"""
ttest_tools.core
----------------
Core statistical kernels for design inference, testing, and effect-size estimation.

Submodules:
  - _data_prep      : design inference, NA-handling, group encoding, pairing
  - _parametric     : Welch / Student two-sample t-test, paired t-test
  - _effect_sizes   : Cohen's d (independent and paired) plus its CIs
  - _noncentral     : noncentral-t tail matching for the paired d interval
  - _estimates      : estimates table builder and residual diagnostics
"""

import jax

# every kernel below works in float64
jax.config.update("jax_enable_x64", True)

__all__ = [
    # submodules
    "_data_prep",
    "_parametric",
    "_effect_sizes",
    "_noncentral",
    "_estimates",
]

# re-export key functions for convenient import
from ._data_prep    import infer_design, paired_differences, resolve_design
from ._parametric   import run_test, t_two_sided_p, _t_test, _one_sample_t_test
from ._effect_sizes import (
    cohens_d,
    pooled_sd,
    paired_cohens_d,
    cohens_d_variance,
    analytic_ci,
    estimate_effect_size,
)
from ._noncentral   import solve_noncentral_tail_match, tail_match_objective
from ._estimates    import (
    EstimatesTableBuilder,
    mean_ci,
    build_table,
    compute_diagnostics,
)
