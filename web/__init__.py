"""Storefront web app: public product API and admin API."""
