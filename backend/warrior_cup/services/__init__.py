"""Domain services: scoring, tournament state, live sync and course lookup.

Pure(ish) logic imported by HTTP routes and socket handlers, keeping
transport concerns separated from tournament mechanics.
"""
