"""Billing domain: Stripe subscriptions and webhook-driven subscription state."""
