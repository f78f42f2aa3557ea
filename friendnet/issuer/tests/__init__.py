"""Tests for :mod:`friendnet.issuer`."""
