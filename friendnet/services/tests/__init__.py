"""Tests for :mod:`friendnet.services`."""
