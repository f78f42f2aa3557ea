"""Tests for :mod:`friendnet.users`."""
