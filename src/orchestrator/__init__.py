# src/orchestrator/__init__.py — v1
