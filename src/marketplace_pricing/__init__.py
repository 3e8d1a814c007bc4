"""
Marketplace Pricing Package

Line-item pricing for a rental marketplace.
Resolves an order into priced line items (base price, fees, coupon, commissions)
that reconcile with the hosted marketplace backend's own computation.
"""

__version__ = "1.0.0"
