"""Routing — compiled routes and a first-match-wins route table.

Routes are compiled while the registry bootstraps and the table is
frozen before the first request is dispatched.
"""
