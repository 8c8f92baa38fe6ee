"""Sparse machine memory."""
