"""Return maturity audit: lag distributions, cohort gross-up projections and
fairness-matched before/after return contrasts."""
