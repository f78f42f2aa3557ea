"""Tests for :mod:`friendnet.storage`."""
