# src/limits/__init__.py — v1
