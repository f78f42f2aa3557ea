"""Tests for :mod:`friendnet.push`."""
