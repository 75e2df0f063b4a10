"""Pre-configured scenario packs for synthetic return data.

Each scenario describes a product whose return behaviour does or does not
change on a go-live date, for exercising the maturity and contrast engines
without production data.

Examples
--------
>>> from datetime import date
>>> from return_maturity_audit.synthetic import generate_return_orders
>>> from return_maturity_audit.synthetic.scenarios import IMPROVED_RETURN_SCENARIO
>>>
>>> orders = generate_return_orders(
...     date(2024, 1, 1),
...     date(2024, 4, 15),
...     scenario=IMPROVED_RETURN_SCENARIO,
... )
"""

from datetime import date

from return_maturity_audit.synthetic.generator import ReturnScenarioConfig

CHANGE_DATE = date(2024, 3, 1)

# Steady 10% return rate with a ~12 day median lag, no change
BASELINE_RETURN_SCENARIO = ReturnScenarioConfig(
    return_probability=0.10,
    change_date=None,
    seed=7,
)

# Listing fix on the change date cuts returns from 12% to 6%
IMPROVED_RETURN_SCENARIO = ReturnScenarioConfig(
    return_probability=0.12,
    post_change_return_probability=0.06,
    change_date=CHANGE_DATE,
    seed=11,
)

# Packaging change on the change date raises returns from 8% to 16%
DEGRADED_RETURN_SCENARIO = ReturnScenarioConfig(
    return_probability=0.08,
    post_change_return_probability=0.16,
    change_date=CHANGE_DATE,
    seed=13,
)

# Returns arrive within a few days; markers clamp to their floors
FAST_RETURN_SCENARIO = ReturnScenarioConfig(
    return_probability=0.10,
    lag_median_days=2.0,
    lag_sigma=0.4,
    seed=17,
)
