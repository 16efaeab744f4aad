"""Stateless NPC conversation gateway."""
