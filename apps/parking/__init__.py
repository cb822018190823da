"""Parking spot inventory.

Spots are managed by administrators; anyone may browse them and filter by
type, status or by a free time window.
"""
