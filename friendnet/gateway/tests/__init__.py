"""Tests for :mod:`friendnet.gateway`."""
