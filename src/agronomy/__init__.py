# src/agronomy/__init__.py — v1
