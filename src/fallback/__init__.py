# src/fallback/__init__.py — v1
