"""College admissions fit and eligibility engine."""
