"""
Billing services.

Pure calculators (offer selection, pricing, renewal pricing, lifecycle
transitions) plus the plan catalog and checkout flow that talk to the backend.
"""
