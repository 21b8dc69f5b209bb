"""Storefront shopping context — cart state, pricing, coupons and persistence."""
