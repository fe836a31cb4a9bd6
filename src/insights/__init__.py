# src/insights/__init__.py — v1
