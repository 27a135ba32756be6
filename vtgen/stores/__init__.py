"""Persistent stores used between generation passes."""

from .artifact_manifest import ArtifactManifest, content_hash

__all__ = ["ArtifactManifest", "content_hash"]
