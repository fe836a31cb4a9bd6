# src/cache/fingerprint.py — v3
"""Request fingerprinting: the deterministic cache key of a descriptor.

The key is ``<category>:<sha256>`` over a canonical JSON rendering of the
params (sorted keys at every depth, compact separators), so two requests
with the same category and semantically equal params always collide,
whatever order their keys were inserted in.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from agrosight.core.models import RequestDescriptor


class FingerprintError(TypeError):
    """Raised when request params cannot be canonicalized."""


def compute_fingerprint(descriptor: RequestDescriptor) -> str:
    """Compute the cache key of a request descriptor.

    Args:
        descriptor: Request to fingerprint.

    Returns:
        Fingerprint string, stable across processes.

    Raises:
        FingerprintError: If params contain values with no JSON form.
    """
    canonical = canonicalize_params(descriptor.params)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{descriptor.category}:{digest}"


def canonicalize_params(params: Mapping[str, Any]) -> str:
    """Serialize params to canonical JSON."""
    try:
        return json.dumps(
            params,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_reject,
        )
    except (TypeError, ValueError) as e:
        raise FingerprintError(f"Cannot fingerprint params: {e}") from e


def _reject(value: Any) -> Any:
    """json.dumps hook: mapping views and pydantic models are flattened, the rest refused."""
    if isinstance(value, Mapping):
        return dict(value)
    dump = getattr(value, "model_dump", None)
    if callable(dump):
        return dump(mode="json")
    raise TypeError(f"unsupported param type {type(value).__name__}")
