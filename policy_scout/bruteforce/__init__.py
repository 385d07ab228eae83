"""policy_scout.bruteforce: direct probing of conventional privacy-policy paths."""

from .route_prober import FALLBACK_PATHS, PROBE_PATHS, RouteProber, looks_like_policy_path

__all__ = ["RouteProber", "PROBE_PATHS", "FALLBACK_PATHS", "looks_like_policy_path"]
