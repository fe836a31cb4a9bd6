# src/dashboard/__init__.py — v1
