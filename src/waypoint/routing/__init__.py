"""Routing: ordered route table with first-match-wins lookup.

Routes and groups are registered during setup; the router resolves its
groups once and freezes before the first request is matched.
"""
