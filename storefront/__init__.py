"""Apparel Cast storefront API package."""
